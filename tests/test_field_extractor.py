"""Tests for end-to-end field extraction from transcripts."""

import pytest

from cpscan.extraction.field_extractor import FieldExtractor, extract_fields
from cpscan.extraction.results import (
    NOT_FOUND,
    ExtractionResult,
    HitPoints,
    Missing,
)
from cpscan.ocr.transcript import Line, Transcript
from cpscan.utils.config import ExtractionConfig


class TestNotFound:
    """Tests for the missing-field marker."""

    def test_falsy_and_distinct_from_empty(self) -> None:
        assert not NOT_FOUND
        assert NOT_FOUND != ""
        assert NOT_FOUND is Missing.NOT_FOUND
        assert repr(NOT_FOUND) == "NOT_FOUND"

    def test_default_result_all_missing(self) -> None:
        result = ExtractionResult()
        assert result.found_fields() == []
        assert result.missing_fields() == ["name", "cp", "hp", "stardust", "moves"]


class TestExtractionResult:
    """Tests for result serialization."""

    def test_to_dict(self) -> None:
        result = ExtractionResult(
            name="Garchomp", cp=2207, hp=HitPoints(187, 187), cp_line_index=1
        )
        data = result.to_dict()
        assert data["name"] == "Garchomp"
        assert data["cp"] == 2207
        assert data["hp"] == {"current": 187, "maximum": 187}
        assert data["stardust"] is None
        assert data["moves"] is None
        assert data["cp_line_index"] == 1
        assert data["missing"] == ["stardust", "moves"]

    def test_to_flat_dict(self) -> None:
        result = ExtractionResult(cp=500, moves=["Tackle", "Bite"])
        flat = result.to_flat_dict()
        assert flat == {
            "name": "",
            "cp": "500",
            "hp": "",
            "stardust": "",
            "moves": "Tackle; Bite",
        }


class TestFieldExtractor:
    """Tests for the FieldExtractor phases."""

    def test_full_screen(self, garchomp_lines: list[str]) -> None:
        result = extract_fields("\n".join(garchomp_lines), garchomp_lines)

        assert result.cp == 2207
        assert result.cp_line_index == 1
        assert result.ratio_line_index == 3
        assert result.hp == HitPoints(187, 187)
        assert result.name == "Garchomp"
        assert result.stardust == 4000
        assert result.moves == ["Dragon Tail", "Earthquake", "Outrage"]
        assert result.missing_fields() == []
        assert result.strategies == {
            "cp": "labeled",
            "hp": "ratio",
            "name": "backward",
            "stardust": "power_up_label",
            "moves": "name_power_lines",
        }

    def test_minimal_screen(self) -> None:
        lines = ["11:42", "CP2207", "Garchomp", "HP 187/187"]
        result = extract_fields("\n".join(lines), lines)

        assert result.cp == 2207
        assert result.cp_line_index == 1
        assert result.name == "Garchomp"
        assert result.hp == HitPoints(187, 187)
        assert result.ratio_line_index == 3
        assert result.stardust is NOT_FOUND
        assert result.moves is NOT_FOUND

    def test_unlabeled_cp_skips_hp_ratio(self) -> None:
        result = extract_fields("", ["11:42", "1500", "Pidgey", "HP 60/60"])

        assert result.cp == 1500
        assert result.cp_line_index == 1
        assert result.strategies["cp"] == "unlabeled"
        assert result.name == "Pidgey"
        assert result.hp == HitPoints(60, 60)

    def test_unlabeled_cp_and_forward_name(self) -> None:
        result = extract_fields("", ["9:15", "", "3200", "Metagross"])

        assert result.cp == 3200
        assert result.cp_line_index == 2
        assert result.ratio_line_index is None
        assert result.hp is NOT_FOUND
        assert result.name == "Metagross"
        assert result.strategies["cp"] == "unlabeled"
        assert result.strategies["name"] == "forward"

    def test_labeled_wins_over_larger_unlabeled(self) -> None:
        result = extract_fields("", ["CP 450", "1200"])
        assert result.cp == 450
        assert result.strategies["cp"] == "labeled"

    def test_misread_label_and_ratio(self) -> None:
        result = extract_fields("", ["CR 1O5O", "Pidgeot", "HP 8O/96"])
        assert result.cp == 1050
        assert result.hp == HitPoints(80, 96)
        assert result.name == "Pidgeot"

    def test_out_of_range_cp_not_reported(self) -> None:
        result = extract_fields("", ["CP 99999", "Dragonite", "HP 100/100"])
        assert result.cp is NOT_FOUND
        assert result.cp_line_index is None
        assert result.hp == HitPoints(100, 100)
        assert result.name == "Dragonite"

    def test_implausible_hp_keeps_anchor(self) -> None:
        result = extract_fields("", ["CP 500", "Pidgey", "HP 300/200"])
        assert result.hp is NOT_FOUND
        assert result.ratio_line_index == 2
        assert result.name == "Pidgey"

    def test_name_is_never_a_number(self) -> None:
        result = extract_fields("", ["Gible"])
        assert result.cp is NOT_FOUND
        assert result.name == "Gible"

    @pytest.mark.parametrize(
        "lines",
        [
            [],
            [""],
            ["", "///", "|||"],
            ["11:42"],
            ["HP", "CP", "POWER UP"],
        ],
    )
    def test_garbage_never_raises(self, lines: list[str]) -> None:
        result = extract_fields("\n".join(lines), lines)
        assert result.cp is NOT_FOUND
        assert result.hp is NOT_FOUND
        assert result.stardust is NOT_FOUND

    def test_accepts_line_records(self) -> None:
        lines = [Line(index=5, text="CP 700"), Line(index=9, text="Pidgey")]
        result = extract_fields("CP 700\nPidgey", lines)
        assert result.cp == 700
        assert result.cp_line_index == 0
        assert result.raw_text == "CP 700\nPidgey"

    def test_custom_config(self) -> None:
        extractor = FieldExtractor(ExtractionConfig(cp_max=1000))
        result = extractor.extract(Transcript.from_lines(["CP 2207", "500"]))
        assert result.cp == 500
        assert result.strategies["cp"] == "unlabeled"

    def test_extractor_reusable(self, garchomp_lines: list[str]) -> None:
        extractor = FieldExtractor()
        first = extractor.extract(Transcript.from_lines(garchomp_lines))
        second = extractor.extract(Transcript.from_lines(["CP 450"]))
        assert first.cp == 2207
        assert second.cp == 450
        assert second.name is NOT_FOUND
