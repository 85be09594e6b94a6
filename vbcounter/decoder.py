"""Binary to BCD conversion for the 8-bit counter output, by shift-and-add-3."""

_INPUT_BITS = 8
_INPUT_MAX = (1 << _INPUT_BITS) - 1
_RESULT_MASK = 0xFFFFF
_BCD_MASK = 0xFFF

# Nibble positions in the 20-bit working register that get the add-3 correction.
_CORRECTED_SHIFTS = (8, 12)


def _correct(result: int, shift: int) -> int:
    """Add 3 to the nibble at ``shift`` if it holds 5 or more."""
    nibble = (result >> shift) & 0xF
    if nibble >= 5:
        mask = 0xF << shift
        result = (result & (_RESULT_MASK ^ mask)) | (((nibble + 3) << shift) & mask)
    return result


def bcd_encode(value: int) -> int:
    """Return the 12-bit BCD code (three digits) for an 8-bit value."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"value must be an int, not {type(value).__name__}")
    if not 0 <= value <= _INPUT_MAX:
        raise ValueError(f"value must be in 0..{_INPUT_MAX}, got {value}")

    result = value
    for _ in range(_INPUT_BITS):
        for shift in _CORRECTED_SHIFTS:
            result = _correct(result, shift)
        result = (result << 1) & _RESULT_MASK
    return (result >> 8) & _BCD_MASK


def bcd_digits(bcd: int) -> tuple[int, int, int]:
    """Split a 12-bit BCD code into (hundreds, tens, units) nibbles."""
    if not isinstance(bcd, int) or isinstance(bcd, bool):
        raise TypeError(f"bcd must be an int, not {type(bcd).__name__}")
    if not 0 <= bcd <= _BCD_MASK:
        raise ValueError(f"bcd must be in 0..{_BCD_MASK:#x}, got {bcd}")
    return (bcd >> 8) & 0xF, (bcd >> 4) & 0xF, bcd & 0xF