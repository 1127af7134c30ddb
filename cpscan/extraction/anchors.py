"""Anchor strategies: the CP value and the ``current/max`` HP ratio.

The CP value sits near the top of the frame behind a two-letter label
that OCR misreads often; the HP ratio sits a few lines lower. Both
line positions are later used to find the species name between them.
"""

import re
from typing import Protocol

from cpscan.ocr.transcript import Transcript
from cpscan.utils.config import ExtractionConfig
from cpscan.utils.logger import get_logger

from .confusion import DIGITISH, clean_digits, has_real_digit, parse_confusable_int
from .results import ExtractionContext, FieldMatch, HitPoints

logger = get_logger(__name__)

# Label readings observed for "CP"; maintained from real scans.
CP_LABEL_VARIANTS: list[str] = [
    r"C\.?\s?P",
    r"CR",
    r"GP",
    r"[O0]P",
    r"CF",
    r"G",
]

_STATUS_BAR = re.compile(r"^\s*\d{1,2}\s*[:.]\s*\d{2}\b")

_LABELED = re.compile(
    r"(?<![A-Za-z])(?i:" + "|".join(CP_LABEL_VARIANTS) + r")"
    r"\D{0,3}?"
    rf"([{DIGITISH}]{{2,10}})"
)

_RUN = re.compile(rf"[{DIGITISH}](?:[{DIGITISH} \t]*[{DIGITISH}])?")

_RATIO_DIGITS = "0-9OoQDIlSZB"
_RATIO = re.compile(
    rf"(?<![{_RATIO_DIGITS}])([{_RATIO_DIGITS}]{{2,4}})"
    r"\s*[/|\\]\s*"
    rf"([{_RATIO_DIGITS}]{{2,4}})(?![{_RATIO_DIGITS}])"
)


class Strategy(Protocol):
    """A single heuristic tried in a fixed order within its phase."""

    name: str

    def attempt(
        self, transcript: Transcript, context: ExtractionContext
    ) -> FieldMatch | None: ...


def looks_like_status_bar(text: str) -> bool:
    """Return True for a leading clock reading such as ``"11:42"``."""
    return bool(_STATUS_BAR.match(text))


def leading_window(transcript: Transcript, config: ExtractionConfig) -> range:
    """Line indices searched for the CP anchor.

    Starts after the status bar when line 0 is one and skipping is on.
    """
    start = 0
    if (
        config.skip_status_bar
        and len(transcript) > 0
        and looks_like_status_bar(transcript.text_at(0))
    ):
        start = 1
    return range(start, min(len(transcript), start + config.anchor_window))


class LabeledValueStrategy:
    """Find ``CP<junk><number>`` with any known label misreading.

    The first line holding an in-range value wins; out-of-range values
    such as a misread ``"CP 99999"`` are refused.

    Args:
        config: Extraction configuration with the CP bounds and window.
    """

    name = "labeled"

    def __init__(self, config: ExtractionConfig) -> None:
        self.config = config

    def attempt(
        self, transcript: Transcript, context: ExtractionContext
    ) -> FieldMatch | None:
        for i in leading_window(transcript, self.config):
            for match in _LABELED.finditer(transcript.text_at(i)):
                blob = match.group(1)
                value = parse_confusable_int(blob)
                if value is None:
                    continue
                if self.config.cp_min <= value <= self.config.cp_max:
                    logger.debug("Labeled CP %d on line %d (%r)", value, i, blob)
                    return FieldMatch(value=value, line_index=i)
                logger.debug("Rejected labeled CP %d on line %d", value, i)
        return None


class UnlabeledBlobStrategy:
    """Take the largest in-range number anywhere in the leading window.

    Higher recall than ``LabeledValueStrategy`` and weaker; only used
    when the labeled search fails. Runs may contain whitespace because
    OCR sometimes splits a number, so both the joined run and each of
    its pieces are considered. A ``current/max`` HP ratio on a line is
    never read as a CP value.

    Args:
        config: Extraction configuration with the CP bounds and window.
    """

    name = "unlabeled"

    def __init__(self, config: ExtractionConfig) -> None:
        self.config = config

    def _candidates(self, text: str) -> list[str]:
        candidates: list[str] = []
        for match in _RUN.finditer(_RATIO.sub(" ", text)):
            run = match.group(0)
            pieces = run.split()
            for candidate in ["".join(pieces), *pieces]:
                if len(candidate) >= 2 and candidate not in candidates:
                    candidates.append(candidate)
        return candidates

    def attempt(
        self, transcript: Transcript, context: ExtractionContext
    ) -> FieldMatch | None:
        best: FieldMatch | None = None
        for i in leading_window(transcript, self.config):
            for candidate in self._candidates(transcript.text_at(i)):
                value = parse_confusable_int(candidate)
                if value is None:
                    continue
                if not self.config.cp_min <= value <= self.config.cp_max:
                    continue
                if best is None or value > best.value:
                    best = FieldMatch(value=value, line_index=i)
        if best is not None:
            logger.debug("Unlabeled CP %d on line %d", best.value, best.line_index)
        return best


class RatioAnchorStrategy:
    """Find the ``current/max`` HP line a few lines below the CP anchor.

    The match position is the anchor even when the numbers themselves
    are implausible; in that case the match value is ``None``.

    Args:
        config: Extraction configuration with the ratio window and HP cap.
    """

    name = "ratio"

    def __init__(self, config: ExtractionConfig) -> None:
        self.config = config

    def _hit_points(self, current: str, maximum: str) -> HitPoints | None:
        cur_digits = clean_digits(current)
        max_digits = clean_digits(maximum)
        if not cur_digits or not max_digits:
            return None
        hp = HitPoints(current=int(cur_digits), maximum=int(max_digits))
        if 1 <= hp.current <= hp.maximum <= self.config.hp_max:
            return hp
        return None

    def attempt(
        self, transcript: Transcript, context: ExtractionContext
    ) -> FieldMatch | None:
        start = 0 if context.cp_line_index is None else context.cp_line_index + 1
        end = min(len(transcript), start + self.config.ratio_window)

        for i in range(start, end):
            match = _RATIO.search(transcript.text_at(i))
            if match is None or not has_real_digit(match.group(0)):
                continue
            hp = self._hit_points(match.group(1), match.group(2))
            logger.debug("Ratio anchor on line %d (hp=%s)", i, hp)
            return FieldMatch(value=hp, line_index=i)
        return None
