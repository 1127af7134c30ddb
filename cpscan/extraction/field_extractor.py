"""Heuristic field extraction from an OCR transcript.

Runs the phases in order: CP anchor, HP ratio anchor, name, Stardust,
moves. Each phase is an ordered list of strategies; the first one to
return a match wins and later ones are not tried. A phase with no match
leaves its field as ``NOT_FOUND`` and the scan carries on.
"""

from collections.abc import Sequence

from cpscan.ocr.transcript import Line, Transcript
from cpscan.utils.config import ExtractionConfig
from cpscan.utils.logger import get_logger

from .anchors import (
    LabeledValueStrategy,
    RatioAnchorStrategy,
    Strategy,
    UnlabeledBlobStrategy,
)
from .details import MoveListStrategy, StardustStrategy
from .names import BackwardNameStrategy, ForwardNameStrategy
from .results import ExtractionContext, ExtractionResult, FieldMatch

logger = get_logger(__name__)


class FieldExtractor:
    """Recovers structured fields from transcripts of uncertain accuracy.

    Holds no per-scan state, so one instance can serve concurrent scans.

    Args:
        config: Extraction configuration. Defaults are used when omitted.
    """

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self.config = config or ExtractionConfig()
        self.cp_strategies: list[Strategy] = [
            LabeledValueStrategy(self.config),
            UnlabeledBlobStrategy(self.config),
        ]
        self.ratio_strategies: list[Strategy] = [RatioAnchorStrategy(self.config)]
        self.name_strategies: list[Strategy] = [
            BackwardNameStrategy(self.config),
            ForwardNameStrategy(self.config),
        ]
        self.stardust_strategies: list[Strategy] = [StardustStrategy(self.config)]
        self.move_strategies: list[Strategy] = [MoveListStrategy(self.config)]

    def _run_phase(
        self,
        phase: str,
        strategies: list[Strategy],
        transcript: Transcript,
        context: ExtractionContext,
        result: ExtractionResult,
    ) -> FieldMatch | None:
        for strategy in strategies:
            try:
                match = strategy.attempt(transcript, context)
            except (ValueError, IndexError) as exc:
                logger.warning("%s strategy %s failed: %s", phase, strategy.name, exc)
                continue
            if match is not None:
                result.strategies[phase] = strategy.name
                return match
        logger.debug("No %s found by %d strategies", phase, len(strategies))
        return None

    def extract(self, transcript: Transcript) -> ExtractionResult:
        """Run every phase over a transcript.

        Args:
            transcript: OCR transcript of one screenshot.

        Returns:
            Extraction result; unrecovered fields hold ``NOT_FOUND``.
        """
        context = ExtractionContext()
        result = ExtractionResult(raw_text=transcript.full_text)

        cp = self._run_phase("cp", self.cp_strategies, transcript, context, result)
        if cp is not None:
            result.cp = cp.value
            result.cp_line_index = context.cp_line_index = cp.line_index

        ratio = self._run_phase(
            "hp", self.ratio_strategies, transcript, context, result
        )
        if ratio is not None:
            result.ratio_line_index = context.ratio_line_index = ratio.line_index
            if ratio.value is not None:
                result.hp = ratio.value

        name = self._run_phase(
            "name", self.name_strategies, transcript, context, result
        )
        if name is not None:
            result.name = name.value

        stardust = self._run_phase(
            "stardust", self.stardust_strategies, transcript, context, result
        )
        if stardust is not None:
            result.stardust = stardust.value
            context.stardust_line_index = stardust.line_index

        moves = self._run_phase(
            "moves", self.move_strategies, transcript, context, result
        )
        if moves is not None:
            result.moves = moves.value

        logger.info(
            "Extracted %d/%d fields (missing: %s)",
            len(result.found_fields()),
            len(result.found_fields()) + len(result.missing_fields()),
            ", ".join(result.missing_fields()) or "none",
        )
        return result


def extract_fields(
    full_text: str | None,
    lines: Sequence[Line | str],
    config: ExtractionConfig | None = None,
) -> ExtractionResult:
    """Map ``(full_text, lines)`` to an ``ExtractionResult``.

    Args:
        full_text: Concatenated OCR text, or ``None`` to join the lines.
        lines: OCR lines in reading order, as ``Line`` records or strings.
        config: Extraction configuration. Defaults are used when omitted.

    Returns:
        Extraction result with ``NOT_FOUND`` for every unrecovered field.
    """
    transcript = Transcript.from_lines(lines, full_text=full_text)
    return FieldExtractor(config).extract(transcript)
