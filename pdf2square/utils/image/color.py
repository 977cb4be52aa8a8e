"""Background colour parsing for letterboxed canvases."""

from __future__ import annotations

from dataclasses import dataclass
import string

from pdf2square.errors import InvalidColorError
from pdf2square.utils.log_utils import logger


_TRANSPARENT_TOKENS = frozenset({"transparent", "#0000"})
_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True)
class ColorSpec:
    """An RGB colour with a fractional alpha in ``[0.0, 1.0]``."""

    red: int
    green: int
    blue: int
    alpha: float = 1.0

    @property
    def is_opaque(self) -> bool:
        return self.alpha >= 1.0

    def as_rgb(self) -> tuple[int, int, int]:
        return (self.red, self.green, self.blue)

    def as_rgba(self) -> tuple[int, int, int, int]:
        """Return the colour as an 8-bit RGBA tuple suitable for Pillow."""
        return (self.red, self.green, self.blue, round(self.alpha * 255))


WHITE = ColorSpec(255, 255, 255, 1.0)
TRANSPARENT = ColorSpec(0, 0, 0, 0.0)


def parse_background(value: str, output_format: str = "png") -> ColorSpec:
    """Parse ``#RRGGBB``, ``#RRGGBBAA`` or ``transparent`` into a ``ColorSpec``.

    JPEG has no alpha channel, so ``transparent`` is replaced by opaque white
    (with a warning) when ``output_format`` is ``jpeg``/``jpg``.
    """
    token = str(value).strip().lower()
    if token in _TRANSPARENT_TOKENS:
        if output_format.lower() == "png":
            return TRANSPARENT
        logger.warning("JPEG cannot be transparent; using a white background instead.")
        return WHITE

    hex_digits = token[1:] if token.startswith("#") else token
    if len(hex_digits) not in (6, 8) or not _HEX_DIGITS.issuperset(hex_digits):
        raise InvalidColorError(
            f"Invalid background color {value!r}. Use '#RRGGBB', '#RRGGBBAA', or 'transparent'."
        )

    red, green, blue = (int(hex_digits[i : i + 2], 16) for i in (0, 2, 4))
    alpha = int(hex_digits[6:8], 16) / 255 if len(hex_digits) == 8 else 1.0
    return ColorSpec(red, green, blue, alpha)


__all__ = ["TRANSPARENT", "WHITE", "ColorSpec", "parse_background"]
