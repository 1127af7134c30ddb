"""Accuracy benchmarking for the field extractor.

Runs the extractor over labeled transcripts (or compares ready-made
predictions) and reports per-field precision, recall, F1 and accuracy.
Used to tune thresholds and windows against real captures rather than
by reasoning alone.
"""

import csv
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cpscan.extraction.field_extractor import FieldExtractor
from cpscan.extraction.results import FIELD_NAMES
from cpscan.ocr.transcript import Transcript
from cpscan.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class FieldMetrics:
    """Precision, recall, F1, and accuracy for a single field."""

    field_name: str
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    total: int = 0

    @property
    def precision(self) -> float:
        """Fraction of reported values that are correct."""
        denom = self.true_positives + self.false_positives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def recall(self) -> float:
        """Fraction of expected values that were recovered correctly."""
        denom = self.true_positives + self.false_negatives
        if denom == 0:
            return 0.0
        return self.true_positives / denom

    @property
    def f1(self) -> float:
        if self.precision + self.recall == 0:
            return 0.0
        return 2 * (self.precision * self.recall) / (self.precision + self.recall)

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return self.true_positives / self.total


@dataclass
class BenchmarkResult:
    """Aggregated benchmark results across all labeled cases."""

    total_cases: int
    overall_accuracy: float
    overall_f1: float
    field_metrics: dict[str, FieldMetrics]
    errors: list[str] = field(default_factory=list)


def _normalize(value: Any) -> str | None:
    """Canonical comparison form; ``None`` means no value."""
    if value is None:
        return None
    if isinstance(value, dict) and {"current", "maximum"} <= value.keys():
        value = f"{value['current']}/{value['maximum']}"
    if isinstance(value, list):
        value = "; ".join(str(v) for v in value)
    text = " ".join(str(value).split()).lower()
    return text or None


class Evaluator:
    """Compares extraction output against ground-truth labels.

    A prediction of ``None`` for a labeled field counts as a false
    negative; a wrong value counts as a false positive.
    """

    def evaluate(
        self,
        predictions: dict[str, dict[str, Any]],
        ground_truth: dict[str, dict[str, Any]],
    ) -> BenchmarkResult:
        """Compare predictions against ground truth and compute metrics.

        Args:
            predictions: Case id to field values (``None`` when not found).
            ground_truth: Case id to expected field values.

        Returns:
            Aggregated benchmark results with per-field metrics.
        """
        field_metrics: dict[str, FieldMetrics] = {}
        errors: list[str] = []

        for case_id, expected in ground_truth.items():
            predicted = predictions.get(case_id)
            if predicted is None:
                errors.append(f"Missing prediction for {case_id}")
                predicted = {}

            for field_name, expected_value in expected.items():
                metrics = field_metrics.setdefault(field_name, FieldMetrics(field_name))
                metrics.total += 1

                pred = _normalize(predicted.get(field_name))
                exp = _normalize(expected_value)
                if pred is None:
                    metrics.false_negatives += 1
                elif pred == exp:
                    metrics.true_positives += 1
                else:
                    metrics.false_positives += 1

        measured = [m for m in field_metrics.values() if m.total > 0]
        return BenchmarkResult(
            total_cases=len(ground_truth),
            overall_accuracy=(
                sum(m.accuracy for m in measured) / len(measured) if measured else 0.0
            ),
            overall_f1=sum(m.f1 for m in measured) / len(measured) if measured else 0.0,
            field_metrics=field_metrics,
            errors=errors,
        )

    def evaluate_transcripts(
        self,
        cases: dict[str, dict[str, Any]],
        extractor: FieldExtractor | None = None,
    ) -> BenchmarkResult:
        """Run the extractor over labeled transcripts and score it.

        Args:
            cases: Case id to ``{"lines": [...], "expected": {...}}``.
            extractor: Extractor to benchmark. Defaults to a default one.

        Returns:
            Benchmark results.
        """
        extractor = extractor or FieldExtractor()
        predictions: dict[str, dict[str, Any]] = {}
        ground_truth: dict[str, dict[str, Any]] = {}

        for case_id, case in cases.items():
            transcript = Transcript.from_lines(case.get("lines", []))
            predictions[case_id] = extractor.extract(transcript).to_dict()
            ground_truth[case_id] = {
                k: v for k, v in case.get("expected", {}).items() if k in FIELD_NAMES
            }

        logger.info("Benchmarked %d transcripts", len(cases))
        return self.evaluate(predictions, ground_truth)

    def generate_report(
        self, result: BenchmarkResult, output_path: Path | None = None
    ) -> str:
        """Format benchmark results as a text table.

        Args:
            result: Benchmark results to format.
            output_path: Optional path to write the report file.

        Returns:
            Formatted report string.
        """
        lines = [
            "=" * 60,
            "EXTRACTION BENCHMARK",
            "=" * 60,
            f"Cases:             {result.total_cases}",
            f"Overall Accuracy:  {result.overall_accuracy:.2%}",
            f"Overall F1 Score:  {result.overall_f1:.3f}",
            "",
            f"{'Field':<12} {'Precision':>10} {'Recall':>10} {'F1':>10} {'Accuracy':>10}",
            "-" * 60,
        ]

        for name, metrics in sorted(result.field_metrics.items()):
            lines.append(
                f"{name:<12} {metrics.precision:>10.2%} {metrics.recall:>10.2%} "
                f"{metrics.f1:>10.3f} {metrics.accuracy:>10.2%}"
            )
        lines.append("=" * 60)

        if result.errors:
            lines.append("Errors:")
            lines.extend(f"  - {error}" for error in result.errors)

        report = "\n".join(lines)

        if output_path:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(report)
            logger.info("Report written to %s", output_path)

        return report


def load_cases(path: Path) -> dict[str, dict[str, Any]]:
    """Load labeled transcripts from JSON or CSV.

    JSON: ``{"case": {"lines": [...], "expected": {"cp": 2207, ...}}}``.
    CSV: a ``case`` column, a ``lines`` column with ``|``-separated OCR
    lines, and one column per expected field.

    Raises:
        ValueError: If the file format is not supported.
    """
    if path.suffix == ".json":
        with open(path) as f:
            return json.load(f)

    if path.suffix == ".csv":
        cases: dict[str, dict[str, Any]] = {}
        with open(path, newline="") as f:
            for row in csv.DictReader(f):
                case_id = row.pop("case")
                lines = row.pop("lines", "") or ""
                cases[case_id] = {
                    "lines": lines.split("|"),
                    "expected": {k: v for k, v in row.items() if v},
                }
        return cases

    raise ValueError(f"Unsupported benchmark format: {path.suffix}")
