"""Command protocol for the Vbuddy board over a serial link."""

from __future__ import annotations

import os
import re
import select
import sys

from vbcounter.serialport import SerialDevice, SerialError

try:
    import termios
except ImportError:  # not available on every platform
    termios = None

BAUD_RATE = 115200
DEFAULT_CONFIG = "vbuddy.cfg"

_ACK_MAX_BYTES = 80
_VALUE_MAX_BYTES = 10
_OVERFLOW = -3
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")

_configured_fds: set[int] = set()


def read_port_name(path=DEFAULT_CONFIG) -> str:
    """Return the serial port name held on the first line of the config file."""
    with open(path, encoding="utf-8") as config:
        line = config.readline()
    port = line.rstrip("\r\n")
    if not port:
        raise ValueError(f"no port name in {path}")
    return port


def parse_value(reply: str) -> int:
    """Extract the integer from a ``$<number>*`` reply.

    A spurious leading ``$`` not followed by a number is skipped.
    """
    start = reply.find("$")
    if start < 0:
        raise ValueError(f"no '$' in reply {reply!r}")
    following = reply[start + 1 : start + 2]
    if not following or ord(following) < ord("0"):
        start = reply.find("$", start + 1)
        if start < 0:
            raise ValueError(f"no number in reply {reply!r}")
    body = reply[start + 1 :]
    end = body.find("*")
    if end >= 0:
        body = body[:end]
    match = _INT_PREFIX.match(body)
    if match is None:
        raise ValueError(f"no number in reply {reply!r}")
    return int(match.group(1))


def get_key() -> str:
    """Return a key waiting on standard input, or an empty string; never blocks."""
    fd = sys.stdin.fileno()
    if fd not in _configured_fds:
        if termios is not None and os.isatty(fd):
            attrs = termios.tcgetattr(fd)
            attrs[3] &= ~termios.ICANON
            termios.tcsetattr(fd, termios.TCSANOW, attrs)
        _configured_fds.add(fd)
    ready, _, _ = select.select([fd], [], [], 0)
    if not ready:
        return ""
    return os.read(fd, 1).decode("latin-1")


class Vbuddy:
    """The Vbuddy board: seven-segment digits, TFT screen, flag, rotary value and audio."""

    def __init__(self, device=None) -> None:
        self.device = device if device is not None else SerialDevice()

    def _read_reply(self, final_char: str, max_bytes: int) -> str:
        while True:
            try:
                return self.device.read_string_no_timeout(final_char, max_bytes)
            except SerialError as exc:
                if exc.code != _OVERFLOW:
                    raise

    def _ack(self) -> None:
        while not self._read_reply("\n", _ACK_MAX_BYTES).startswith("$"):
            pass

    def _command(self, message: str) -> None:
        self.device.write_string(message)
        self._ack()

    def _query(self, message: str) -> int:
        self.device.write_string(message)
        self.device.flush_receiver()
        return parse_value(self._read_reply("*", _VALUE_MAX_BYTES))

    def open(self, config_path=DEFAULT_CONFIG) -> str:
        """Connect to the port named in the config file and clear the screen."""
        port = read_port_name(config_path)
        try:
            self.device.open(port, BAUD_RATE)
        except SerialError:
            print(f"\n** Error opening port: {port}")
            raise
        print(f"\n ** Connected to Vbuddy via: {port}")
        self.device.flush_receiver()
        self.clear()
        return port

    def close(self) -> None:
        """Show STOP on the screen and close the connection."""
        self._command("$t,    STOP,R\n")
        self.device.close()

    def clear(self) -> None:
        """Clear the TFT screen to black."""
        self._command("$C\n")

    def hex(self, digit: int, value: int) -> None:
        """Show a 4-bit value on seven-segment digit 0..5 (1 is right-most)."""
        if digit not in range(6):
            raise ValueError(f"digit must be in 0..5, got {digit}")
        self._command(f"$H{digit},{value}\n")

    def plot(self, y: int, low: int, high: int) -> None:
        """Plot ``y`` scaled between ``low`` and ``high`` at the next x position."""
        self._command(f"$p,{y},{low},{high}\n")

    def header(self, text: str) -> None:
        """Write a centred header at the top of the screen."""
        self._command(f"$T,{text}\n")

    def cycle(self, count: int) -> None:
        """Show the cycle count at the bottom right of the screen."""
        self._command(f"$t,cyc:{count:4d},R\n")

    def flag(self) -> bool:
        """Return the current flag value."""
        self.device.write_string("$Y\n")
        reply = self._read_reply("*", _VALUE_MAX_BYTES)
        return reply[1:2] == "1"

    def set_mode(self, mode: int) -> None:
        """Set the flag mode: 0 toggles, 1 is one-shot."""
        self._command(f"$y,{mode:1d}\n")

    def value(self) -> int:
        """Return the parameter value set by the rotary encoder."""
        return self._query("$V\n")

    def init_analog_out(self, nsamp: int) -> None:
        """Prepare the DAC output buffer for ``nsamp`` samples."""
        self._command(f"$S,{nsamp}\n")

    def output_sample(self, sample: int) -> None:
        """Send one sample to the DAC buffer."""
        self._command(f"$s,{sample}\n")

    def aout_on(self) -> None:
        """Turn analog output on."""
        self._command("$O\n")

    def aout_off(self) -> None:
        """Turn analog output off."""
        self._command("$o\n")

    def init_mic_in(self, nsamp: int) -> None:
        """Prepare the microphone buffer to capture ``nsamp`` samples."""
        self._command(f"$M,{nsamp}\n")

    def mic_value(self) -> int:
        """Return the next sample from the microphone buffer."""
        return self._query("$m\n")