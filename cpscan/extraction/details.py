"""Strategies for the lower half of the screen: Stardust cost and moves.

Both sit below the HP ratio. The Stardust cost is printed on or next to
the power-up button; each move is a name followed by its power.
"""

import re

from cpscan.ocr.transcript import Transcript
from cpscan.utils.config import ExtractionConfig
from cpscan.utils.logger import get_logger

from .confusion import DIGITISH, clean_digits, has_real_digit, parse_confusable_int
from .names import clean_name, compile_deny_list
from .results import ExtractionContext, FieldMatch

logger = get_logger(__name__)

_POWER_UP_LABEL = re.compile(
    r"\b(?:P[O0]WER\s*-?\s*UP|STAR\s*DUST)", re.IGNORECASE
)
_NUMBER = re.compile(rf"[{DIGITISH}]{{2,6}}")
_THOUSANDS = re.compile(r"(?<=\d)[,.](?=\d{3}\b)")
_MOVE = re.compile(
    r"^[^A-Za-z]*"
    r"([A-Za-z][A-Za-z'.\- ]*[A-Za-z])"
    r"[^A-Za-z0-9]+"
    r"([0-9OoIlSZB]{1,3})"
    r"[^A-Za-z0-9]*$"
)


class StardustStrategy:
    """Read the Stardust cost next to the power-up label.

    Searches from the lowest anchor found so far for the first label
    line, then takes the first in-range number on that line or the
    following ``stardust_window`` lines. Thousands separators are
    dropped first, so ``"2,500"`` reads as 2500.

    Args:
        config: Extraction configuration with the Stardust bounds.
    """

    name = "power_up_label"

    def __init__(self, config: ExtractionConfig) -> None:
        self.config = config

    def _label_line(self, transcript: Transcript, start: int) -> int | None:
        for i in range(start, len(transcript)):
            if _POWER_UP_LABEL.search(transcript.text_at(i)):
                return i
        return None

    def attempt(
        self, transcript: Transcript, context: ExtractionContext
    ) -> FieldMatch | None:
        start = context.latest_anchor() or 0
        label = self._label_line(transcript, start)
        if label is None:
            return None

        end = min(len(transcript), label + self.config.stardust_window + 1)
        for i in range(label, end):
            text = _THOUSANDS.sub("", transcript.text_at(i))
            for match in _NUMBER.finditer(text):
                value = parse_confusable_int(match.group(0))
                if value is None:
                    continue
                if self.config.stardust_min <= value <= self.config.stardust_max:
                    logger.debug("Stardust %d on line %d", value, i)
                    return FieldMatch(value=value, line_index=i)
        return None


class MoveListStrategy:
    """Collect ``<move name> <power>`` lines below the anchors.

    Starts after the Stardust line when known, else after the lowest
    anchor. Returns up to ``max_moves`` names in screen order.

    Args:
        config: Extraction configuration with the move window and limits.
    """

    name = "name_power_lines"

    def __init__(self, config: ExtractionConfig) -> None:
        self.config = config
        self._deny = compile_deny_list(config.move_deny_list)

    def _move_name(self, text: str) -> str | None:
        if self._deny is not None and self._deny.search(text):
            return None
        match = _MOVE.match(text.strip())
        if match is None:
            return None
        power = match.group(2)
        if not has_real_digit(power):
            return None
        if int(clean_digits(power)) > self.config.move_power_max:
            return None
        return clean_name(match.group(1), None)

    def attempt(
        self, transcript: Transcript, context: ExtractionContext
    ) -> FieldMatch | None:
        if context.stardust_line_index is not None:
            start = context.stardust_line_index + 1
        else:
            anchor = context.latest_anchor()
            start = 0 if anchor is None else anchor + 1
        end = min(len(transcript), start + self.config.move_window)

        moves: list[str] = []
        first_line: int | None = None
        for i in range(start, end):
            name = self._move_name(transcript.text_at(i))
            if name is None:
                continue
            moves.append(name)
            if first_line is None:
                first_line = i
            if len(moves) >= self.config.max_moves:
                break

        if first_line is None:
            return None
        logger.debug("Moves %s from line %d", moves, first_line)
        return FieldMatch(value=moves, line_index=first_line)
