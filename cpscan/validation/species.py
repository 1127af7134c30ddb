"""Read-only species reference table.

Maps a species to its display name, candy family and the highest CP it
can plausibly show, loaded from YAML. OCR often garbles a letter or two
of the name, so lookups fall back to fuzzy matching.
"""

import difflib
from dataclasses import dataclass
from pathlib import Path

import yaml

from cpscan.utils.logger import get_logger

logger = get_logger(__name__)

MATCH_THRESHOLD = 0.8


@dataclass(frozen=True)
class SpeciesEntry:
    """One row of the species table."""

    id: str
    name: str
    family: str
    max_cp: int


class SpeciesTable:
    """Case-insensitive species lookup by name or id.

    Args:
        entries: Species rows; later rows with a duplicate id are ignored.
    """

    def __init__(self, entries: list[SpeciesEntry] | None = None) -> None:
        self._by_key: dict[str, SpeciesEntry] = {}
        self._entries: list[SpeciesEntry] = []
        for entry in entries or []:
            if entry.id.lower() in self._by_key:
                continue
            self._entries.append(entry)
            self._by_key[entry.id.lower()] = entry
            self._by_key.setdefault(entry.name.lower(), entry)

    @classmethod
    def load(cls, path: Path) -> "SpeciesTable":
        """Load the table from a YAML file with a top-level ``species`` list.

        A missing or empty file gives an empty table.
        """
        if not path.exists():
            logger.debug("No species table at %s", path)
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        entries = [
            SpeciesEntry(
                id=str(row["id"]),
                name=str(row["name"]),
                family=str(row.get("family", row["name"])),
                max_cp=int(row["max_cp"]),
            )
            for row in data.get("species", [])
        ]
        logger.info("Loaded %d species from %s", len(entries), path)
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    @property
    def entries(self) -> list[SpeciesEntry]:
        return list(self._entries)

    def lookup(self, name: str) -> SpeciesEntry | None:
        """Find a species by exact name or id, then by close spelling.

        Args:
            name: Name as recovered from OCR.

        Returns:
            Matching entry, or ``None`` when nothing is close enough.
        """
        key = name.strip().lower()
        if not key:
            return None
        if key in self._by_key:
            return self._by_key[key]

        close = difflib.get_close_matches(
            key, list(self._by_key), n=1, cutoff=MATCH_THRESHOLD
        )
        if close:
            logger.debug("Fuzzy species match: %r -> %r", name, close[0])
            return self._by_key[close[0]]
        return None

    def family_of(self, name: str) -> str | None:
        entry = self.lookup(name)
        return entry.family if entry else None
