"""Species-name strategies anchored on the CP and HP lines.

The name is printed between the CP value and the HP ratio. Lines in
that region also carry status words and type labels, which are kept
out with a deny-list.
"""

import re

from cpscan.ocr.transcript import Transcript
from cpscan.utils.config import ExtractionConfig
from cpscan.utils.logger import get_logger

from .results import ExtractionContext, FieldMatch

logger = get_logger(__name__)

# Letters are Unicode letters, so accented names survive cleaning.
_NOT_NAME_CHARS = re.compile(r"[^\w \-.']|[\d_]")
_NOT_LETTERS = re.compile(r"[\W\d_]")
_SPACES = re.compile(r"\s+")

MIN_NAME_LENGTH = 3


def compile_deny_list(tokens: list[str]) -> re.Pattern[str] | None:
    """Build one case-insensitive whole-word pattern from deny-list tokens.

    Whole-word matching keeps ``"Dragonite"`` clear of the ``dragon``
    type label while ``"HEAVIEST DRAGON EVER"`` is still caught.
    """
    words = [r"\s*".join(re.escape(w) for w in t.split()) for t in tokens if t.strip()]
    if not words:
        return None
    return re.compile(r"\b(?:" + "|".join(words) + r")\b", re.IGNORECASE)


def clean_name(text: str, deny: re.Pattern[str] | None) -> str | None:
    """Return the cleaned name candidate for a line, or ``None`` to reject it."""
    if deny is not None and deny.search(text):
        return None
    if len(_NOT_LETTERS.sub("", text)) < MIN_NAME_LENGTH:
        return None
    cleaned = _SPACES.sub(" ", _NOT_NAME_CHARS.sub("", text)).strip()
    if len(cleaned) < MIN_NAME_LENGTH:
        return None
    return cleaned


class BackwardNameStrategy:
    """Scan upward from just above the HP line toward the CP line.

    The candidate nearest the HP line wins. Needs the ratio anchor.

    Args:
        config: Extraction configuration with the deny-list.
    """

    name = "backward"

    def __init__(self, config: ExtractionConfig) -> None:
        self.config = config
        self._deny = compile_deny_list(config.deny_list)

    def attempt(
        self, transcript: Transcript, context: ExtractionContext
    ) -> FieldMatch | None:
        if context.ratio_line_index is None:
            return None
        stop = -1 if context.cp_line_index is None else context.cp_line_index

        for i in range(context.ratio_line_index - 1, stop, -1):
            name = clean_name(transcript.text_at(i), self._deny)
            if name is not None:
                logger.debug("Name %r on line %d (backward)", name, i)
                return FieldMatch(value=name, line_index=i)
        return None


class ForwardNameStrategy:
    """Scan downward from just below the CP line within a small window.

    Args:
        config: Extraction configuration with the deny-list and window.
    """

    name = "forward"

    def __init__(self, config: ExtractionConfig) -> None:
        self.config = config
        self._deny = compile_deny_list(config.deny_list)

    def attempt(
        self, transcript: Transcript, context: ExtractionContext
    ) -> FieldMatch | None:
        start = 0 if context.cp_line_index is None else context.cp_line_index + 1
        end = min(len(transcript), start + self.config.name_window)

        for i in range(start, end):
            name = clean_name(transcript.text_at(i), self._deny)
            if name is not None:
                logger.debug("Name %r on line %d (forward)", name, i)
                return FieldMatch(value=name, line_index=i)
        return None
