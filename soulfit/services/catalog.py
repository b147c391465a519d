"""Exercise catalog used by the single-phase generation strategy.

The model picks exercises by catalog identifier; this module filters the
catalog by the studio's equipment and resolves the identifiers it returns.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from ..schemas.base import WireModel
from ..schemas.program import Difficulty

_CATALOG: list[CatalogEntry] | None = None

_NON_ALNUM = re.compile(r"[^0-9a-z]+")


class CatalogEntry(WireModel):
    id: str
    name: str
    equipment: str
    difficulty: Difficulty = "medium"
    target_areas: list[str] = []
    description: str = ""


def load_catalog() -> list[CatalogEntry]:
    global _CATALOG
    if _CATALOG is None:
        path = Path(__file__).resolve().parent.parent / "data" / "exercise_catalog.json"
        _CATALOG = [CatalogEntry.model_validate(e) for e in json.loads(path.read_text())]
    return _CATALOG


def filter_by_equipment(
    catalog: list[CatalogEntry], equipment: list[str]
) -> list[CatalogEntry]:
    wanted = {normalize(e) for e in equipment}
    return [entry for entry in catalog if normalize(entry.equipment) in wanted]


def normalize(text: str) -> str:
    """Case-fold and collapse punctuation/whitespace. 'Roll-Up ' -> 'roll up'."""
    return _NON_ALNUM.sub(" ", text.casefold()).strip()


class ExerciseResolver:
    """Look up model-returned identifiers in a filtered catalog.

    Tries the exact id, then the normalized id, then the normalized name.
    """

    def __init__(self, candidates: list[CatalogEntry]) -> None:
        self._by_id = {e.id: e for e in candidates}
        self._by_norm_id = {normalize(e.id): e for e in candidates}
        self._by_norm_name = {normalize(e.name): e for e in candidates}

    def resolve(self, identifier: str) -> CatalogEntry | None:
        if identifier in self._by_id:
            return self._by_id[identifier]
        key = normalize(identifier)
        return self._by_norm_id.get(key) or self._by_norm_name.get(key)
