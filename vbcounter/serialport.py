"""Serial port access for talking to the Vbuddy board."""

from __future__ import annotations

import time
from enum import Enum

import serial

SUPPORTED_BAUDS = (9600, 19200, 38400, 57600, 115200)


class DataBits(Enum):
    """Number of data bits in one UART frame."""

    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    SIXTEEN = 16


class StopBits(Enum):
    """Number of stop bits in one UART frame."""

    ONE = 1
    ONE_POINT_FIVE = 1.5
    TWO = 2


class Parity(Enum):
    """Parity bit type."""

    NONE = "none"
    EVEN = "even"
    ODD = "odd"
    MARK = "mark"
    SPACE = "space"


_BYTESIZES = {
    DataBits.FIVE: serial.FIVEBITS,
    DataBits.SIX: serial.SIXBITS,
    DataBits.SEVEN: serial.SEVENBITS,
    DataBits.EIGHT: serial.EIGHTBITS,
}

_STOPBITS = {
    StopBits.ONE: serial.STOPBITS_ONE,
    StopBits.TWO: serial.STOPBITS_TWO,
}

_PARITIES = {
    Parity.NONE: serial.PARITY_NONE,
    Parity.EVEN: serial.PARITY_EVEN,
    Parity.ODD: serial.PARITY_ODD,
}


class SerialError(Exception):
    """A serial operation failed; ``code`` identifies the kind of failure.

    Codes: -1 write or timeout setup failed, -2 device could not be opened or
    read failed, -3 maximum string length reached, -4 unsupported baud rate,
    -7 unsupported data bits, -8 unsupported stop bits, -9 unsupported parity.
    """

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code


class Timer:
    """Measures elapsed wall time in whole milliseconds."""

    def __init__(self) -> None:
        self._start = time.monotonic()

    def start(self) -> None:
        """Restart the timer from now."""
        self._start = time.monotonic()

    def elapsed_ms(self) -> int:
        """Milliseconds elapsed since the timer was started."""
        return int((time.monotonic() - self._start) * 1000)


def _as_byte(value) -> bytes:
    if isinstance(value, int) and not isinstance(value, bool):
        if not 0 <= value <= 0xFF:
            raise ValueError(f"byte value out of range: {value}")
        return bytes([value])
    if isinstance(value, str):
        value = value.encode("latin-1")
    if isinstance(value, (bytes, bytearray)) and len(value) == 1:
        return bytes(value)
    raise ValueError(f"expected a single byte or character, got {value!r}")


class SerialDevice:
    """A serial device opened in non-blocking mode."""

    def __init__(self) -> None:
        self._port = None

    def open(
        self,
        device: str,
        baud: int,
        databits: DataBits = DataBits.EIGHT,
        parity: Parity = Parity.NONE,
        stopbits: StopBits = StopBits.ONE,
    ) -> None:
        """Open ``device`` at ``baud`` with the given frame format."""
        if baud not in SUPPORTED_BAUDS:
            raise SerialError(f"baud rate not supported: {baud}", -4)
        if databits not in _BYTESIZES:
            raise SerialError(f"data bits not supported: {databits}", -7)
        if stopbits not in _STOPBITS:
            raise SerialError(f"stop bits not supported: {stopbits}", -8)
        if parity not in _PARITIES:
            raise SerialError(f"parity not supported: {parity}", -9)
        self.close()
        try:
            self._port = serial.serial_for_url(
                device,
                baudrate=baud,
                bytesize=_BYTESIZES[databits],
                parity=_PARITIES[parity],
                stopbits=_STOPBITS[stopbits],
                timeout=0,
            )
        except (serial.SerialException, OSError, ValueError) as exc:
            self._port = None
            raise SerialError(f"cannot open {device}: {exc}", -2) from exc

    def is_open(self) -> bool:
        """Whether a device is currently open."""
        return self._port is not None and self._port.is_open

    def close(self) -> None:
        """Close the device; safe to call when nothing is open."""
        if self._port is not None:
            self._port.close()
            self._port = None

    def _require_port(self, code: int):
        if not self.is_open():
            raise SerialError("device is not open", code)
        return self._port

    def _write(self, data: bytes) -> None:
        port = self._require_port(-1)
        try:
            written = port.write(data)
        except (serial.SerialException, OSError) as exc:
            raise SerialError(f"write failed: {exc}", -1) from exc
        if written is not None and written != len(data):
            raise SerialError(f"wrote {written} of {len(data)} bytes", -1)

    def write_char(self, byte) -> None:
        """Write one byte (an int, or a one-byte str or bytes)."""
        self._write(_as_byte(byte))

    def write_string(self, text: str) -> None:
        """Write a text string."""
        self._write(text.encode("latin-1"))

    def write_bytes(self, data) -> None:
        """Write raw bytes."""
        self._write(bytes(data))

    def _read(self, size: int) -> bytes:
        port = self._require_port(-2)
        try:
            return port.read(size)
        except (serial.SerialException, OSError) as exc:
            raise SerialError(f"read failed: {exc}", -2) from exc

    def read_char(self, timeout_ms: int = 0) -> bytes | None:
        """Wait for one byte; ``None`` on timeout. A zero timeout waits forever."""
        timer = Timer()
        while timeout_ms == 0 or timer.elapsed_ms() < timeout_ms:
            data = self._read(1)
            if data:
                return data
        return None

    def read_string(
        self, final_char: str, max_bytes: int, timeout_ms: int = 0
    ) -> str | None:
        """Read up to and including ``final_char``; ``None`` on timeout.

        Raises SerialError (code -3) when ``max_bytes`` are read without
        seeing ``final_char``. A zero timeout waits forever.
        """
        if timeout_ms == 0:
            return self.read_string_no_timeout(final_char, max_bytes)
        final = _as_byte(final_char)
        received = bytearray()
        timer = Timer()
        while len(received) < max_bytes:
            remaining = timeout_ms - timer.elapsed_ms()
            if remaining > 0:
                byte = self.read_char(remaining)
                if byte is not None:
                    received += byte
                    if byte == final:
                        return received.decode("latin-1")
            if timer.elapsed_ms() > timeout_ms:
                return None
        raise SerialError(f"no {final_char!r} within {max_bytes} bytes", -3)

    def read_string_no_timeout(self, final_char: str, max_bytes: int) -> str:
        """Read up to and including ``final_char``, waiting as long as needed.

        Raises SerialError (code -3) when ``max_bytes`` are read without
        seeing ``final_char``.
        """
        final = _as_byte(final_char)
        received = bytearray()
        while len(received) < max_bytes:
            byte = self.read_char()
            received += byte
            if byte == final:
                return received.decode("latin-1")
        raise SerialError(f"no {final_char!r} within {max_bytes} bytes", -3)

    def read_bytes(
        self, max_bytes: int, timeout_ms: int = 0, sleep_us: int = 100
    ) -> bytes:
        """Read until ``max_bytes`` arrive or the timeout passes; return what was read."""
        received = bytearray()
        timer = Timer()
        while timeout_ms == 0 or timer.elapsed_ms() < timeout_ms:
            chunk = self._read(max_bytes - len(received))
            if chunk:
                received += chunk
                if len(received) >= max_bytes:
                    return bytes(received)
            time.sleep(sleep_us / 1_000_000)
        return bytes(received)

    def flush_receiver(self) -> None:
        """Discard everything waiting in the receive buffer."""
        self._require_port(-2).reset_input_buffer()

    def available(self) -> int:
        """Number of received bytes not yet read."""
        return self._require_port(-2).in_waiting

    def __enter__(self) -> "SerialDevice":
        return self

    def __exit__(self, *args) -> None:
        self.close()