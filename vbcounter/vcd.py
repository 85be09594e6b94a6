"""Value change dump (VCD) tracing of the counter design's signals."""

from __future__ import annotations

import os
import time as _time
from dataclasses import dataclass
from typing import Callable, TextIO

_FIRST_CODE_CHAR = ord("!")
_CODE_RADIX = 94

_UNIT_NAMES = {0: "s", -3: "ms", -6: "us", -9: "ns", -12: "ps", -15: "fs"}


@dataclass(frozen=True)
class _Signal:
    width: int
    read: Callable[[object], int]


@dataclass(frozen=True)
class _Scope:
    name: str
    variables: tuple[tuple[int, str], ...]
    children: tuple["_Scope", ...] = ()


# Trace slots, numbered as the design's trace declarations number them.
_SIGNALS: dict[int, _Signal] = {
    1: _Signal(1, lambda m: m.clk),
    2: _Signal(1, lambda m: m.rst),
    3: _Signal(1, lambda m: m.en),
    4: _Signal(8, lambda m: m.v),
    5: _Signal(12, lambda m: m.bcd),
    6: _Signal(8, lambda m: m.count),
    7: _Signal(20, lambda m: m.decoder_result),
    8: _Signal(32, lambda m: 8),
    9: _Signal(32, lambda m: 8),
}

# Slots whose value can change between dumps; the rest are parameters.
_CHANGING = (1, 2, 3, 4, 5, 6, 7)

_HIERARCHY = _Scope(
    "TOP",
    ((1, "clk"), (2, "rst"), (3, "en"), (4, "v"), (5, "bcd")),
    (
        _Scope(
            "top",
            (
                (8, "WIDTH"),
                (1, "clk"),
                (2, "rst"),
                (3, "en"),
                (4, "v"),
                (5, "bcd"),
                (6, "count"),
            ),
            (
                _Scope(
                    "myCounter",
                    ((8, "WIDTH"), (1, "clk"), (2, "rst"), (3, "en"), (6, "count")),
                ),
                _Scope(
                    "myDecoder",
                    ((6, "x"), (5, "BCD"), (7, "result"), (9, "i")),
                ),
            ),
        ),
    ),
)


def _code(index: int) -> str:
    """Return the short identifier code used in the dump for a trace slot."""
    n = index - 1
    chars = []
    while True:
        chars.append(chr(_FIRST_CODE_CHAR + n % _CODE_RADIX))
        n //= _CODE_RADIX
        if not n:
            break
    return "".join(chars)


def _timescale(exponent: int) -> str:
    base = exponent - exponent % 3
    return f"{10 ** (exponent - base)}{_UNIT_NAMES[base]}"


def _format_value(index: int, value: int) -> str:
    width = _SIGNALS[index].width
    code = _code(index)
    if width == 1:
        return f"{value}{code}"
    return f"b{value:0{width}b} {code}"


class VcdWriter:
    """Writes the model's signals to a VCD file, one dump per time step."""

    def __init__(self, model) -> None:
        self.model = model
        self._file: TextIO | None = None
        self._last: dict[int, int] = {}
        self._last_time: int | None = None

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self, path: str | os.PathLike) -> None:
        """Create the dump file and write its header; does nothing if already open."""
        if self._file is not None:
            return
        self._file = open(path, "w", encoding="ascii")
        self._last = {}
        self._last_time = None
        self._write_header()

    def _write_header(self) -> None:
        lines = [
            "$version Generated by VcdWriter $end",
            f"$date {_time.strftime('%a %b %d %H:%M:%S %Y')} $end",
            f"$timescale {_timescale(self.model.timeprecision)} $end",
            "",
        ]
        self._declare(_HIERARCHY, 1, lines)
        lines.append("$enddefinitions $end")
        lines.append("")
        self._file.write("\n".join(lines) + "\n")

    def _declare(self, scope: _Scope, depth: int, lines: list[str]) -> None:
        indent = " " * depth
        lines.append(f"{indent}$scope module {scope.name} $end")
        for index, name in scope.variables:
            width = _SIGNALS[index].width
            suffix = "" if width == 1 else f" [{width - 1}:0]"
            lines.append(f"{indent} $var wire {width} {_code(index)} {name}{suffix} $end")
        for child in scope.children:
            self._declare(child, depth + 1, lines)
        lines.append(f"{indent}$upscope $end")

    def dump(self, time: int) -> None:
        """Record the signal values at ``time``; ignored while the file is closed."""
        if self._file is None:
            return
        if time < 0:
            raise ValueError(f"dump time must not be negative, got {time}")
        if self._last_time is not None and time < self._last_time:
            raise ValueError(
                f"dump time {time} is earlier than previous dump time {self._last_time}"
            )

        lines = [f"#{time}"]
        if self._last_time is None:
            for index, signal in _SIGNALS.items():
                value = signal.read(self.model) & ((1 << signal.width) - 1)
                self._last[index] = value
                lines.append(_format_value(index, value))
        elif self.model.activity:
            for index in _CHANGING:
                signal = _SIGNALS[index]
                value = signal.read(self.model) & ((1 << signal.width) - 1)
                if self._last.get(index) != value:
                    self._last[index] = value
                    lines.append(_format_value(index, value))
        self._last_time = time
        self.model.activity = False
        self._file.write("\n".join(lines) + "\n")

    def close(self) -> None:
        """Flush and close the dump file; safe to call more than once."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "VcdWriter":
        return self

    def __exit__(self, *args) -> None:
        self.close()