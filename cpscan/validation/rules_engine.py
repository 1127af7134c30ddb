"""Configurable validation rules for extracted creature-screen fields.

Checks presence and plausible ranges per field and cross-checks the CP
against the species' maximum. Validation is advisory: it reports, it
never alters the extracted values.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from cpscan.extraction.results import NOT_FOUND, ExtractionResult, HitPoints
from cpscan.utils.logger import get_logger

from .species import SpeciesTable

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a single field validation check."""

    field_name: str
    is_valid: bool
    message: str
    rule_name: str


@dataclass
class ValidationReport:
    """Aggregated validation report for one scan."""

    all_valid: bool
    results: list[ValidationResult]
    warnings: list[str] = field(default_factory=list)


Validator = Callable[[str, Any, dict], ValidationResult]


class RulesEngine:
    """Field-level and cross-field validation driven by YAML rules.

    Args:
        rules_path: Path to the validation rules YAML file.
        species: Species reference table for name and CP checks.
    """

    def __init__(
        self,
        rules_path: Path = Path("configs/validation_rules.yaml"),
        species: SpeciesTable | None = None,
    ) -> None:
        self.rules = self._load_rules(rules_path)
        self.species = species or SpeciesTable()
        self._validators: dict[str, Validator] = {
            "required": self._validate_required,
            "cp_range": self._validate_range,
            "stardust_range": self._validate_range,
            "known_species": self._validate_known_species,
            "hp_ratio": self._validate_hp_ratio,
        }

    def _load_rules(self, path: Path) -> dict:
        """Load validation rules from YAML, falling back to defaults."""
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f)
                if data:
                    logger.info("Loaded validation rules from %s", path)
                    return data
        logger.debug("Using default validation rules")
        return self._default_rules()

    def _default_rules(self) -> dict:
        return {
            "name": [{"type": "required"}, {"type": "known_species"}],
            "cp": [
                {"type": "required"},
                {"type": "cp_range", "min": 10, "max": 6500},
            ],
            "hp": [{"type": "hp_ratio"}],
            "stardust": [{"type": "stardust_range", "min": 200, "max": 20000}],
        }

    def validate(self, extraction: ExtractionResult) -> ValidationReport:
        """Validate an extraction result against the loaded rules.

        Args:
            extraction: Fields recovered from one scan.

        Returns:
            Validation report; unknown rule types become warnings.
        """
        results: list[ValidationResult] = []
        warnings: list[str] = []

        for field_name, rules in self.rules.items():
            value = getattr(extraction, field_name, NOT_FOUND)

            for rule in rules or []:
                rule_type = rule.get("type")
                validator = self._validators.get(rule_type)

                if not validator:
                    warnings.append(f"Unknown rule type: {rule_type}")
                    continue

                results.append(validator(field_name, value, rule))

        results.extend(self._cross_validate(extraction))

        all_valid = all(r.is_valid for r in results)
        logger.info(
            "Validation %s (%d checks)",
            "PASSED" if all_valid else "FAILED",
            len(results),
        )
        return ValidationReport(all_valid=all_valid, results=results, warnings=warnings)

    def _validate_required(
        self, field_name: str, value: Any, rule: dict
    ) -> ValidationResult:
        """Check that a field was found and is not blank."""
        if value is not NOT_FOUND and str(value).strip():
            return ValidationResult(field_name, True, "Required field present", "required")
        return ValidationResult(
            field_name, False, f"Required field missing: {field_name}", "required"
        )

    def _validate_range(
        self, field_name: str, value: Any, rule: dict
    ) -> ValidationResult:
        """Check that a numeric field lies within ``[min, max]``."""
        rule_name = rule.get("type", "range")
        if value is NOT_FOUND:
            return ValidationResult(field_name, True, "No value to validate", rule_name)

        low = rule.get("min", 0)
        high = rule.get("max", 1_000_000)
        if low <= value <= high:
            return ValidationResult(field_name, True, "Value in valid range", rule_name)
        return ValidationResult(
            field_name, False, f"Value {value} outside range [{low}, {high}]", rule_name
        )

    def _validate_known_species(
        self, field_name: str, value: Any, rule: dict
    ) -> ValidationResult:
        """Check the name against the species table, when one is loaded."""
        if value is NOT_FOUND:
            return ValidationResult(
                field_name, True, "No value to validate", "known_species"
            )
        if len(self.species) == 0:
            return ValidationResult(
                field_name, True, "No species table loaded", "known_species"
            )

        entry = self.species.lookup(value)
        if entry is None:
            return ValidationResult(
                field_name, False, f"Unknown species: {value}", "known_species"
            )
        return ValidationResult(
            field_name, True, f"Known species: {entry.name}", "known_species"
        )

    def _validate_hp_ratio(
        self, field_name: str, value: Any, rule: dict
    ) -> ValidationResult:
        """Check that current HP does not exceed maximum HP."""
        if not isinstance(value, HitPoints):
            return ValidationResult(field_name, True, "No value to validate", "hp_ratio")
        if 0 < value.current <= value.maximum:
            return ValidationResult(field_name, True, "Valid HP ratio", "hp_ratio")
        return ValidationResult(field_name, False, f"Invalid HP ratio: {value}", "hp_ratio")

    def _cross_validate(self, extraction: ExtractionResult) -> list[ValidationResult]:
        """Check the CP against the recognized species' maximum CP.

        Args:
            extraction: All extracted fields.

        Returns:
            Zero or one cross-field results.
        """
        if extraction.name is NOT_FOUND or extraction.cp is NOT_FOUND:
            return []

        entry = self.species.lookup(extraction.name)
        if entry is None:
            return []

        if extraction.cp <= entry.max_cp:
            return [
                ValidationResult(
                    "cp",
                    True,
                    f"CP within {entry.name} maximum ({entry.max_cp})",
                    "species_max_cp",
                )
            ]
        return [
            ValidationResult(
                "cp",
                False,
                f"CP {extraction.cp} exceeds {entry.name} maximum ({entry.max_cp})",
                "species_max_cp",
            )
        ]
