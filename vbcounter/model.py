"""Cycle model of the top-level design: an 8-bit enabled counter feeding a BCD decoder."""

from __future__ import annotations

from vbcounter.decoder import bcd_encode

_COUNT_MASK = 0xFF
_RESULT_MASK = 0xFFFFF

# Port widths in bits, checked on every evaluation.
_INPUT_WIDTHS = {"clk": 1, "rst": 1, "en": 1, "v": 8}


class TopModel:
    """The counter design with its clock, reset, enable and BCD output ports.

    Inputs are plain attributes (``clk``, ``rst``, ``en``, ``v``); after
    changing them, call :meth:`eval`. The counter advances on a rising
    edge of ``clk``: it is cleared while ``rst`` is high, otherwise it
    adds ``en``, wrapping at 256. ``bcd`` holds the three BCD digits of
    the count.
    """

    model_name = "Vtop"
    timeunit = -12
    timeprecision = -12

    def __init__(self, name: str = "TOP") -> None:
        self.name = name
        self.clk = 0
        self.rst = 0
        self.en = 0
        self.v = 0
        self.bcd = 0
        self.count = 0
        self.decoder_result = 0
        self.activity = False
        self.finished = False
        self._initialized = False
        self._last_clk = 0

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, clk={self.clk}, "
            f"rst={self.rst}, en={self.en}, count={self.count}, bcd={self.bcd:#05x})"
        )

    def _check_inputs(self) -> None:
        for port, width in _INPUT_WIDTHS.items():
            value = getattr(self, port)
            if isinstance(value, bool):
                value = int(value)
                setattr(self, port, value)
            if not isinstance(value, int):
                raise TypeError(f"{port} must be an int, not {type(value).__name__}")
            if not 0 <= value < (1 << width):
                raise ValueError(f"{port} is wider than {width} bit(s): {value}")

    def _decode(self) -> None:
        self.bcd = bcd_encode(self.count)
        self.decoder_result = (self.bcd << 8) & _RESULT_MASK

    def _step(self) -> None:
        if self.clk and not self._last_clk:
            self.count = 0 if self.rst else (self.count + self.en) & _COUNT_MASK
            self._decode()
        self._last_clk = self.clk

    def eval(self) -> None:
        """Propagate the current inputs through the design."""
        self._check_inputs()
        if not self._initialized:
            self._initialized = True
            self._last_clk = self.clk
            self.activity = True
            self._decode()
            self._step()
        self.activity = True
        self._step()

    def final(self) -> None:
        """Mark the simulation as complete."""
        self.finished = True