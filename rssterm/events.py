"""Events passed between the terminal, the application and its widgets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class KeyInput:
    """A key event read from the terminal.

    ``key`` is either a single character (``"j"``, ``"G"``) or a key name
    such as ``"up"``, ``"down"`` or ``"enter"``.
    """

    key: str
    ctrl: bool = False
    shift: bool = False
    pressed: bool = True


@dataclass(frozen=True)
class Scroll:
    """Scroll by ``delta`` rows: positive is down, negative is up.

    ``Scroll.TOP`` and ``Scroll.BOTTOM`` are the deltas that jump to the
    first and last position.
    """

    TOP: ClassVar[int] = -(2**63)
    BOTTOM: ClassVar[int] = 2**63 - 1

    delta: int

    @classmethod
    def to_top(cls) -> Scroll:
        return cls(cls.TOP)

    @classmethod
    def to_bottom(cls) -> Scroll:
        return cls(cls.BOTTOM)

    @property
    def is_top(self) -> bool:
        return self.delta == self.TOP

    @property
    def is_bottom(self) -> bool:
        return self.delta == self.BOTTOM


@dataclass(frozen=True)
class Expand:
    """Enter a nested view, such as the expanded item."""


@dataclass(frozen=True)
class Close:
    """Close the nested view, or leave the application from the top view."""


@dataclass(frozen=True)
class Open:
    """Open the selected item in the default external application."""


@dataclass(frozen=True)
class Exit:
    """Quit the application immediately."""


AppEvent = Scroll | Expand | Close | Open | Exit