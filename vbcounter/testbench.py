"""Testbench that drives the counter model, traces it, and mirrors it on Vbuddy."""

from __future__ import annotations

import argparse

from vbcounter.decoder import bcd_digits
from vbcounter.model import TopModel
from vbcounter.serialport import SerialError
from vbcounter.vbuddy import DEFAULT_CONFIG, Vbuddy
from vbcounter.vcd import VcdWriter

DEFAULT_CYCLES = 300
DEFAULT_VCD = "counter.vcd"
HEADER = "lab1: Counter"


def run(model, vbuddy, vcd, cycles=DEFAULT_CYCLES) -> int:
    """Clock the model for ``cycles`` cycles; return how many cycles ran.

    Reset is held for the first cycles and the enable follows the Vbuddy flag.
    """
    model.clk = 1
    model.rst = 1
    model.en = 0
    vbuddy.set_mode(1)

    ran = 0
    for i in range(cycles):
        for half in range(2):
            vcd.dump(2 * i + half)
            model.clk = 0 if model.clk else 1
            model.eval()

        hundreds, tens, units = bcd_digits(model.bcd)
        vbuddy.hex(4, 0)
        vbuddy.hex(3, hundreds)
        vbuddy.hex(2, tens)
        vbuddy.hex(1, units)
        vbuddy.cycle(i + 1)
        ran = i + 1

        model.rst = int(i < 2)
        model.en = int(vbuddy.flag())
        if model.finished:
            break
    return ran


def main(argv=None) -> int:
    """Run the counter testbench against a connected Vbuddy board."""
    parser = argparse.ArgumentParser(description="Run the counter on Vbuddy.")
    parser.add_argument("--cycles", type=int, default=DEFAULT_CYCLES)
    parser.add_argument("--vcd", default=DEFAULT_VCD, help="trace file to write")
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="Vbuddy config file")
    args = parser.parse_args(argv)

    model = TopModel()
    with VcdWriter(model) as vcd:
        vcd.open(args.vcd)
        vbuddy = Vbuddy()
        try:
            vbuddy.open(args.config)
        except (SerialError, OSError, ValueError) as exc:
            print(f"** Cannot connect to Vbuddy: {exc}")
            return -1
        vbuddy.header(HEADER)
        run(model, vbuddy, vcd, args.cycles)
        if not model.finished:
            vbuddy.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())