"""OCR transcript data types.

A transcript is produced once per scan and never modified afterwards:
the full recognized text plus its lines in top-to-bottom reading order.
"""

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class Line:
    """One recognized line of text.

    ``text`` may contain misrecognized characters; nothing guarantees
    its accuracy.
    """

    index: int
    text: str
    confidence: float = 0.0


@dataclass(frozen=True)
class Transcript:
    """Full OCR text and the ordered line transcript."""

    full_text: str
    lines: tuple[Line, ...]

    @classmethod
    def from_lines(
        cls, lines: Iterable["Line | str"], full_text: str | None = None
    ) -> "Transcript":
        """Build a transcript from plain strings or ``Line`` records.

        Lines are re-indexed by position. When ``full_text`` is omitted
        it is the newline-joined line texts.
        """
        records = tuple(
            Line(index=i, text=line.text, confidence=line.confidence)
            if isinstance(line, Line)
            else Line(index=i, text=str(line))
            for i, line in enumerate(lines)
        )
        if full_text is None:
            full_text = "\n".join(line.text for line in records)
        return cls(full_text=full_text, lines=records)

    def __len__(self) -> int:
        return len(self.lines)

    def text_at(self, index: int) -> str:
        return self.lines[index].text
