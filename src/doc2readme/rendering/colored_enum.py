# topmark:header:start
#
#   project      : Doc2Readme
#   file         : colored_enum.py
#   file_relpath : src/doc2readme/rendering/colored_enum.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""String enum whose members carry a colorizer.

`ColoredStrEnum` members are plain strings (``.value`` is the text) with a
colorizer attached separately, typically a `yachalk` style::

    class Outcome(ColoredStrEnum):
        OK = ("ok", chalk.green)
        FAILED = ("failed", chalk.red_bright)

    Outcome.OK.color("all good")
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol


class Colorizer(Protocol):
    """Callable compatible with `yachalk.ChalkBuilder.__call__`."""

    def __call__(self, *args: object, sep: str = " ") -> str:
        """Return the arguments joined by ``sep`` and decorated for display."""
        ...


class ColoredStrEnum(str, Enum):
    """Enum whose value is a string and that carries an associated colorizer."""

    _value_: str
    _color: Colorizer

    def __new__(cls, text: str, color: Colorizer) -> ColoredStrEnum:
        """Create a member with value ``text`` and colorizer ``color``."""
        obj: ColoredStrEnum = str.__new__(cls, text)
        obj._value_ = text
        obj._color = color
        return obj

    @property
    def value(self) -> str:
        """Return the textual value of the member."""
        return self._value_

    @property
    def color(self) -> Colorizer:
        """Return the colorizer of the member."""
        return self._color
