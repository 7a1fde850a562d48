"""
Ingredient Lookup Service
Matches ingredient names from scanned labels against the reference ingredient dataset
"""

import asyncio
import csv
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from services.timing_logger import TimingLogger

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_JSON_PATH = "data/ingredientsList.json"
DEFAULT_CSV_PATH = "data/ingredientsList.csv"

# Dataset column -> IngredientRecord field
ROW_FIELDS = {
    "scientific_name": "scientific_name",
    "short_description": "short_description",
    "what_is_it": "what_is_it",
    "what_does_it_do": "what_does_it_do",
    "who_is_it_good_for": "who_is_it_good_for",
    "who_should_avoid": "who_should_avoid",
    "url": "reference_url",
}

_PARENTHETICAL_RE = re.compile(r"\(.*?\)")
_DISALLOWED_CHARS_RE = re.compile(r"[^a-z0-9\s\-]")
_WHITESPACE_RE = re.compile(r"\s+")
_CONCENTRATION_RE = re.compile(r"\d+%")
_NON_ALPHA_RE = re.compile(r"[^a-zA-Z\s]")
_ALIAS_SEPARATORS_RE = re.compile(r"[,/]")


class DataUnavailable(Exception):
    """Raised when no dataset source could be read"""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        details = "; ".join(f"{label}: {reason}" for label, reason in errors.items())
        super().__init__(f"Ingredient dataset unavailable ({details})")


class IngredientRecord(BaseModel):
    """One reference entry from the ingredient dataset"""
    name: str
    scientific_name: Optional[str] = None
    short_description: Optional[str] = None
    what_is_it: Optional[str] = None
    what_does_it_do: Optional[str] = None
    who_is_it_good_for: Optional[str] = None
    who_should_avoid: Optional[str] = None
    reference_url: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> Optional["IngredientRecord"]:
        """
        Map a raw dataset row onto a record.

        Args:
            row: Row keyed by dataset column names

        Returns:
            IngredientRecord, or None when the row has no usable name
        """
        name = _clean_value(row.get("name"))
        if not name:
            return None

        fields = {
            field: _clean_value(row.get(column))
            for column, field in ROW_FIELDS.items()
        }
        return cls(name=name, **fields)


def _clean_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_name(value: Optional[str]) -> str:
    """
    Build the lookup key for an ingredient name.

    "Vitamin C (L-Ascorbic Acid)" and "vitamin c" both become "vitamin c".
    Total over all strings; empty input gives an empty key.
    """
    if not value:
        return ""
    text = value.lower()
    text = _PARENTHETICAL_RE.sub("", text)
    text = _DISALLOWED_CHARS_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def simplify_name(value: str) -> str:
    """Drop concentration tokens like "10%" and everything that isn't a letter"""
    text = _CONCENTRATION_RE.sub("", value)
    return _NON_ALPHA_RE.sub(" ", text)


def build_index(rows: Iterable[Dict[str, Any]]) -> Dict[str, IngredientRecord]:
    """
    Build the normalized-name index from raw dataset rows.

    Each record is stored under its full normalized name and under every
    comma/slash separated part of the name. Earlier rows win on key clashes.
    """
    index: Dict[str, IngredientRecord] = {}

    for row in rows:
        if not isinstance(row, dict):
            continue
        record = IngredientRecord.from_row(row)
        if record is None:
            continue

        key = normalize_name(record.name)
        if key:
            index.setdefault(key, record)

        # "Alcohol, Fragrance" is also reachable as "alcohol" and "fragrance"
        for part in _ALIAS_SEPARATORS_RE.split(record.name):
            alias = normalize_name(part.strip())
            if alias:
                index.setdefault(alias, record)

    return index


def read_json_rows(path: Path) -> List[Dict[str, Any]]:
    """Read the pre-generated JSON dataset (an array of row objects)"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array of rows, got {type(data).__name__}")
    return data


def read_csv_rows(path: Path) -> List[Dict[str, Any]]:
    """Read the delimited dataset with a header row, skipping blank lines"""
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        return [{(key or "").strip(): value for key, value in row.items()} for row in reader]


def resolve_dataset_path(value: str) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = BASE_DIR / path
    return path


Reader = Callable[[Path], List[Dict[str, Any]]]


class IngredientLookupService:
    """Lazily loads the ingredient dataset once and answers name lookups"""

    def __init__(self, json_path: Optional[str] = None, csv_path: Optional[str] = None):
        json_path = json_path or os.getenv("INGREDIENTS_JSON_PATH", DEFAULT_JSON_PATH)
        csv_path = csv_path or os.getenv("INGREDIENTS_CSV_PATH", DEFAULT_CSV_PATH)

        # Tried in order, first readable source wins
        self.sources: List[Tuple[str, Path, Reader]] = [
            ("json", resolve_dataset_path(json_path), read_json_rows),
            ("csv", resolve_dataset_path(csv_path), read_csv_rows),
        ]

        self._index: Optional[Dict[str, IngredientRecord]] = None
        self._pending: Optional[asyncio.Task] = None
        self.source: Optional[str] = None

        logger.info(f"Ingredient lookup initialized (json: {self.sources[0][1]}, csv: {self.sources[1][1]})")

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    async def load_index(self) -> Dict[str, IngredientRecord]:
        """
        Return the normalized index, loading the dataset on first use.

        Concurrent first callers share one in-flight load. A failed load is
        not cached, so the next call tries again.

        Raises:
            DataUnavailable: no source could be read
        """
        if self._index is not None:
            return self._index

        if self._pending is None:
            self._pending = asyncio.create_task(self._load())
            self._pending.add_done_callback(self._on_load_done)

        return await asyncio.shield(self._pending)

    def _on_load_done(self, task: asyncio.Task):
        if task.cancelled() or task.exception() is not None:
            self._pending = None

    async def _load(self) -> Dict[str, IngredientRecord]:
        errors: Dict[str, str] = {}

        for label, path, reader in self.sources:
            try:
                with TimingLogger(f"Load ingredient dataset ({label})"):
                    rows = await asyncio.to_thread(reader, path)
            except (OSError, ValueError, RecursionError, csv.Error) as e:
                logger.warning(f"Ingredient source '{label}' unavailable at {path}: {str(e)}")
                errors[label] = str(e)
                continue

            index = build_index(rows)
            self._index = index
            self.source = label
            logger.info(f"Loaded {len(rows)} ingredient rows from {label} ({len(index)} lookup keys)")
            return index

        logger.error(f"No ingredient dataset could be loaded: {errors}")
        raise DataUnavailable(errors)

    async def get_ingredient_details(self, name: Optional[str]) -> Optional[IngredientRecord]:
        """
        Look up reference data for an ingredient name as printed on a label.

        Args:
            name: Free-form ingredient name, e.g. "Niacinamide 10%"

        Returns:
            Matching IngredientRecord, or None when the name is unknown or
            the dataset could not be loaded
        """
        if not name:
            return None

        try:
            index = await self.load_index()
        except DataUnavailable as e:
            logger.error(f"Ingredient lookup for '{name}' skipped: {str(e)}")
            return None

        record = index.get(normalize_name(name))
        if record is not None:
            logger.debug(f"Ingredient HIT: {name}")
            return record

        record = index.get(normalize_name(simplify_name(name)))
        if record is not None:
            logger.debug(f"Ingredient HIT (simplified): {name}")
            return record

        logger.debug(f"Ingredient MISS: {name}")
        return None

    async def get_many(self, names: List[str]) -> List[Optional[IngredientRecord]]:
        """Look up several names concurrently, preserving input order"""
        return list(await asyncio.gather(*(self.get_ingredient_details(n) for n in names)))

    def stats(self) -> Dict[str, Any]:
        """Loader state for health checks"""
        if self._index is None:
            return {"loaded": False, "source": None, "entries": 0, "records": 0}

        return {
            "loaded": True,
            "source": self.source,
            "entries": len(self._index),
            "records": len({id(record) for record in self._index.values()}),
        }


# Singleton instance
_ingredient_service = None

def get_ingredient_service() -> IngredientLookupService:
    """Get or create the singleton IngredientLookupService instance"""
    global _ingredient_service
    if _ingredient_service is None:
        _ingredient_service = IngredientLookupService()
    return _ingredient_service


async def get_ingredient_details(name: Optional[str]) -> Optional[IngredientRecord]:
    """Look up an ingredient using the shared service"""
    return await get_ingredient_service().get_ingredient_details(name)
