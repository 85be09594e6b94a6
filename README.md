# vbcounter

A cycle model of a small digital design: an 8-bit counter with reset and
enable, whose value a shift-and-add-3 (double-dabble) decoder turns into three
BCD digits. The package writes the design's signals to a VCD waveform file and
can drive a Vbuddy board over a serial port, showing the count on its
seven-segment displays.

## Installing

    pip install vbcounter

For running the tests:

    pip install "vbcounter[test]"
    pytest

## Running the testbench

Put a file named `vbuddy.cfg` in the working directory. Its first line holds
the serial port the board is attached to, for example `/dev/ttyUSB0`. Then:

    vbcounter

Options:

- `--cycles N` – number of clock cycles to run (default 300)
- `--vcd PATH` – waveform file to write (default `counter.vcd`)
- `--config PATH` – file holding the port name (default `vbuddy.cfg`)

The testbench writes the header `lab1: Counter` to the screen and sets the
board's flag to one-shot mode. On every cycle it shows the count's hundreds,
tens and units on hex digits 3, 2 and 1 (digit 4 shows 0), reports the cycle
number on the screen, and counts forward by one whenever the flag is set. The
counter is held in reset for the first cycles. At the end the screen shows
`STOP` and the port is closed. If the board cannot be reached, the command
prints a message and exits with status -1.

## Using the pieces

### BCD conversion

    from vbcounter.decoder import bcd_encode, bcd_digits

    bcd = bcd_encode(137)      # 0x137
    bcd_digits(bcd)            # (1, 3, 7)

`bcd_encode` takes values 0..255 and `bcd_digits` takes codes 0..0xFFF;
anything else raises `ValueError` (or `TypeError` for non-integers).

### The model

`vbcounter.model.TopModel` is driven the way a simulator drives a design: set
the inputs `clk`, `rst`, `en` and `v`, call `eval()`, read `bcd` (and the
internal `count`). The counter moves on a rising edge of `clk`: it is cleared
while `rst` is 1, otherwise it adds `en`, wrapping at 256. Inputs wider than
their port raise `ValueError`.

    from vbcounter.model import TopModel

    top = TopModel("TOP")
    top.rst, top.en, top.clk = 1, 0, 0
    top.eval()
    top.clk = 1
    top.eval()                 # rising edge: the counter resets

`final()` marks the simulation as finished; the testbench stops early when it
sees that.

### Waveforms

    from vbcounter.vcd import VcdWriter

    with VcdWriter(top) as vcd:
        vcd.open("counter.vcd")
        vcd.dump(0)

The dump holds the top-level ports and the counter and decoder internals,
with a 1 ps timescale. `dump` does nothing while the file is closed, and
raises `ValueError` for a negative time or one earlier than the last.

### The board

`vbcounter.vbuddy.Vbuddy` sends the board's commands: `open`, `close`,
`clear`, `hex`, `plot`, `header`, `cycle`, `flag`, `set_mode`, `value`,
`init_analog_out`, `output_sample`, `aout_on`, `aout_off`, `init_mic_in` and
`mic_value`. The same module has `read_port_name` (reads the config file),
`parse_value` (extracts the number from a `$<number>*` reply) and `get_key`
(a non-blocking read of one key from standard input).

It sits on `vbcounter.serialport.SerialDevice`, which opens a port at 9600,
19200, 38400, 57600 or 115200 baud. Failures raise `SerialError`, whose `code`
tells the kind of failure. Port names are handed to pyserial's
`serial_for_url`, so URLs such as `loop://` work as well as device paths.

`vbcounter.testbench.run(model, vbuddy, vcd, cycles)` ties a model, a board
and a tracer together and returns the number of cycles run.

## What it does not do

The model is this one counter design, written by hand in Python; the package
does not read or simulate hardware description files. The `v` input is
carried and traced but drives nothing.