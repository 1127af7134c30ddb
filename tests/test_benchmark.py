"""Tests for the extraction benchmarking system."""

import json
from pathlib import Path

import pytest

from cpscan.benchmark.evaluator import (
    BenchmarkResult,
    Evaluator,
    FieldMetrics,
    load_cases,
)


class TestFieldMetrics:
    """Tests for FieldMetrics calculations."""

    def test_precision_partial(self) -> None:
        m = FieldMetrics("cp", true_positives=3, false_positives=1)
        assert m.precision == pytest.approx(0.75)

    def test_precision_zero_denom(self) -> None:
        assert FieldMetrics("cp").precision == 0.0

    def test_recall_partial(self) -> None:
        m = FieldMetrics("cp", true_positives=1, false_negatives=1)
        assert m.recall == pytest.approx(0.5)

    def test_recall_zero_denom(self) -> None:
        assert FieldMetrics("cp").recall == 0.0

    def test_f1_perfect(self) -> None:
        m = FieldMetrics("cp", true_positives=4, total=4)
        assert m.f1 == pytest.approx(1.0)

    def test_f1_zero(self) -> None:
        assert FieldMetrics("cp", false_positives=2).f1 == 0.0

    def test_accuracy(self) -> None:
        m = FieldMetrics("cp", true_positives=1, false_negatives=1, total=2)
        assert m.accuracy == pytest.approx(0.5)
        assert FieldMetrics("cp").accuracy == 0.0


class TestEvaluator:
    """Tests for the Evaluator class."""

    def setup_method(self) -> None:
        self.evaluator = Evaluator()

    def test_perfect_predictions(self) -> None:
        gt = {"a": {"cp": 2207, "name": "Garchomp"}}
        pred = {"a": {"cp": 2207, "name": "Garchomp"}}
        result = self.evaluator.evaluate(pred, gt)
        assert result.total_cases == 1
        assert result.overall_accuracy == pytest.approx(1.0)
        assert result.field_metrics["cp"].true_positives == 1

    def test_missing_prediction(self) -> None:
        result = self.evaluator.evaluate({}, {"a": {"cp": 500}})
        assert result.errors == ["Missing prediction for a"]
        assert result.field_metrics["cp"].false_negatives == 1

    def test_not_found_counts_as_false_negative(self) -> None:
        result = self.evaluator.evaluate({"a": {"cp": None}}, {"a": {"cp": 500}})
        assert result.field_metrics["cp"].false_negatives == 1

    def test_wrong_value(self) -> None:
        result = self.evaluator.evaluate({"a": {"cp": 250}}, {"a": {"cp": "2500"}})
        assert result.field_metrics["cp"].false_positives == 1

    def test_case_and_type_insensitive(self) -> None:
        result = self.evaluator.evaluate(
            {"a": {"cp": 2500, "name": "GARCHOMP"}},
            {"a": {"cp": "2500", "name": "garchomp"}},
        )
        assert result.overall_accuracy == pytest.approx(1.0)

    def test_hp_and_moves_normalized(self) -> None:
        result = self.evaluator.evaluate(
            {"a": {"hp": {"current": 10, "maximum": 20}, "moves": ["Tackle", "Bite"]}},
            {"a": {"hp": "10/20", "moves": "Tackle; Bite"}},
        )
        assert result.field_metrics["hp"].true_positives == 1
        assert result.field_metrics["moves"].true_positives == 1

    def test_empty_ground_truth(self) -> None:
        result = self.evaluator.evaluate({}, {})
        assert result.total_cases == 0
        assert result.overall_accuracy == 0.0

    def test_evaluate_transcripts(self, garchomp_lines: list[str]) -> None:
        cases = {
            "garchomp": {
                "lines": garchomp_lines,
                "expected": {
                    "cp": 2207,
                    "name": "Garchomp",
                    "hp": "187/187",
                    "stardust": 4000,
                    "moves": ["Dragon Tail", "Earthquake", "Outrage"],
                    "notes": "ignored",
                },
            },
            "metagross": {
                "lines": ["9:15", "", "3200", "Metagross"],
                "expected": {"cp": 3200, "name": "Metagross", "hp": "150/150"},
            },
        }
        result = self.evaluator.evaluate_transcripts(cases)
        assert result.total_cases == 2
        assert "notes" not in result.field_metrics
        assert result.field_metrics["cp"].accuracy == pytest.approx(1.0)
        assert result.field_metrics["hp"].true_positives == 1
        assert result.field_metrics["hp"].false_negatives == 1


class TestGenerateReport:
    """Tests for report generation."""

    def setup_method(self) -> None:
        self.evaluator = Evaluator()

    def _result(self, **kwargs) -> BenchmarkResult:
        defaults = {
            "total_cases": 1,
            "overall_accuracy": 0.95,
            "overall_f1": 0.9,
            "field_metrics": {"cp": FieldMetrics("cp", true_positives=1, total=1)},
        }
        defaults.update(kwargs)
        return BenchmarkResult(**defaults)

    def test_report_contains_header(self) -> None:
        report = self.evaluator.generate_report(self._result())
        assert "EXTRACTION BENCHMARK" in report
        assert "95.00%" in report
        assert "cp" in report

    def test_report_shows_errors(self) -> None:
        report = self.evaluator.generate_report(
            self._result(errors=["Missing prediction for a"])
        )
        assert "Errors:" in report
        assert "Missing prediction" in report

    def test_report_writes_to_file(self, tmp_path: Path) -> None:
        output = tmp_path / "sub" / "report.txt"
        self.evaluator.generate_report(self._result(), output)
        assert "EXTRACTION BENCHMARK" in output.read_text()


class TestLoadCases:
    """Tests for labeled case loading."""

    def test_load_json(self, tmp_path: Path) -> None:
        data = {"a": {"lines": ["CP 500"], "expected": {"cp": 500}}}
        path = tmp_path / "cases.json"
        path.write_text(json.dumps(data))
        assert load_cases(path) == data

    def test_load_csv(self, tmp_path: Path) -> None:
        path = tmp_path / "cases.csv"
        path.write_text(
            "case,lines,cp,name\n"
            "a,CP 500|Pidgey,500,Pidgey\n"
            "b,3200|Metagross,3200,\n"
        )
        cases = load_cases(path)
        assert cases["a"]["lines"] == ["CP 500", "Pidgey"]
        assert cases["a"]["expected"] == {"cp": "500", "name": "Pidgey"}
        assert "name" not in cases["b"]["expected"]

    def test_load_unsupported_format(self, tmp_path: Path) -> None:
        path = tmp_path / "cases.yaml"
        path.touch()
        with pytest.raises(ValueError, match="Unsupported"):
            load_cases(path)
