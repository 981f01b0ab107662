"""
Content catalog loader.

Reads subject catalogs from JSON and turns them into CandidateItems. A
catalog path may be a single file or a directory of ``*.json`` files.

File format:
    {
        "subject": "kannada",
        "items": [
            {"id": "kn-001", "text": "ಅಮ್ಮ", "complexityLevel": 1},
            ...
        ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sprout.core.errors import DomainValidationError
from sprout.learning.candidates import CandidateItem


class CatalogError(Exception):
    """Raised when a catalog file is missing or malformed."""


class CatalogEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    text: str = ""
    complexity_level: int = Field(alias="complexityLevel", ge=1, default=1)


class SubjectCatalog(BaseModel):
    subject: str = Field(min_length=1)
    items: list[CatalogEntry] = Field(default_factory=list)

    def to_candidates(self) -> list[CandidateItem]:
        return [
            CandidateItem(
                id=entry.id,
                subject=self.subject,
                complexity_level=entry.complexity_level,
                text=entry.text,
            )
            for entry in self.items
        ]


def load_catalog_file(path: Path) -> list[CandidateItem]:
    """Load one subject catalog file."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        catalog = SubjectCatalog.model_validate(raw)
    except OSError as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Invalid JSON in catalog {path}: {e}") from e
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog {path}: {e}") from e

    try:
        candidates = catalog.to_candidates()
    except DomainValidationError as e:
        raise CatalogError(f"Invalid catalog {path}: {e}") from e
    logger.debug(f"Loaded {len(candidates)} items for {catalog.subject} from {path}")
    return candidates


def load_catalog(path: Path) -> list[CandidateItem]:
    """
    Load every candidate item under ``path``.

    Args:
        path: A catalog JSON file or a directory of them

    Returns:
        CandidateItems in file order (directories sorted by file name)

    Raises:
        CatalogError: If the path does not exist, a file is malformed or an
            item id appears more than once
    """
    path = Path(path)
    if path.is_file():
        files = [path]
    elif path.is_dir():
        files = sorted(path.glob("*.json"))
    else:
        raise CatalogError(f"Catalog path not found: {path}")

    candidates: list[CandidateItem] = []
    sources: dict[str, Path] = {}
    for file in files:
        for item in load_catalog_file(file):
            if item.id in sources:
                raise CatalogError(
                    f"Duplicate item id {item.id!r} in {file} (first seen in {sources[item.id]})"
                )
            sources[item.id] = file
            candidates.append(item)
    return candidates


def subject_index(candidates: list[CandidateItem]) -> dict[str, str]:
    """item id -> subject, as used by the statistics breakdown."""
    return {item.id: item.subject for item in candidates}
