"""Result types shared by the field extraction strategies."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal


class Missing(Enum):
    """Marker for a field no strategy could recover.

    Distinct from an empty string, which means text was recognized as
    blank.
    """

    NOT_FOUND = "not_found"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = Missing.NOT_FOUND
NotFound = Literal[Missing.NOT_FOUND]

FIELD_NAMES = ("name", "cp", "hp", "stardust", "moves")


@dataclass(frozen=True)
class HitPoints:
    """Current and maximum HP read from a ``current/max`` ratio."""

    current: int
    maximum: int

    def __str__(self) -> str:
        return f"{self.current}/{self.maximum}"


@dataclass(frozen=True)
class FieldMatch:
    """A value accepted by a strategy and the line it came from."""

    value: Any
    line_index: int


@dataclass
class ExtractionContext:
    """Anchor positions discovered so far in one scan."""

    cp_line_index: int | None = None
    ratio_line_index: int | None = None
    stardust_line_index: int | None = None

    def latest_anchor(self) -> int | None:
        """Return the lowest anchor line on screen, if any."""
        anchors = [
            i
            for i in (self.cp_line_index, self.ratio_line_index, self.stardust_line_index)
            if i is not None
        ]
        return max(anchors) if anchors else None


@dataclass
class ExtractionResult:
    """Structured fields recovered from one transcript.

    Every field is populated independently; a field no strategy
    recovered holds ``NOT_FOUND``.
    """

    name: str | NotFound = NOT_FOUND
    cp: int | NotFound = NOT_FOUND
    hp: HitPoints | NotFound = NOT_FOUND
    stardust: int | NotFound = NOT_FOUND
    moves: list[str] | NotFound = NOT_FOUND
    cp_line_index: int | None = None
    ratio_line_index: int | None = None
    raw_text: str = ""
    strategies: dict[str, str] = field(default_factory=dict)

    def found_fields(self) -> list[str]:
        return [n for n in FIELD_NAMES if getattr(self, n) is not NOT_FOUND]

    def missing_fields(self) -> list[str]:
        return [n for n in FIELD_NAMES if getattr(self, n) is NOT_FOUND]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain JSON types, ``NOT_FOUND`` becoming ``None``."""
        hp = self.hp
        return {
            "name": None if self.name is NOT_FOUND else self.name,
            "cp": None if self.cp is NOT_FOUND else self.cp,
            "hp": (
                None
                if hp is NOT_FOUND
                else {"current": hp.current, "maximum": hp.maximum}
            ),
            "stardust": None if self.stardust is NOT_FOUND else self.stardust,
            "moves": None if self.moves is NOT_FOUND else list(self.moves),
            "cp_line_index": self.cp_line_index,
            "ratio_line_index": self.ratio_line_index,
            "missing": self.missing_fields(),
        }

    def to_flat_dict(self) -> dict[str, str]:
        """Serialize for CSV rows: one string per field, blank when not found."""
        values: dict[str, str] = {}
        for name in FIELD_NAMES:
            value = getattr(self, name)
            if value is NOT_FOUND:
                values[name] = ""
            elif isinstance(value, list):
                values[name] = "; ".join(value)
            else:
                values[name] = str(value)
        return values
