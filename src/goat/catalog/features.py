"""Feature catalog loaded from a schema-validated JSON document."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from goat.core.types import Feature, LogEntry

logger = logging.getLogger(__name__)

CATALOG_ROOT = Path(__file__).resolve().parent
DEFAULT_CATALOG_PATH = CATALOG_ROOT / "data" / "features.json"
SCHEMA_PATH = CATALOG_ROOT / "schemas" / "features.schema.json"


class FeatureCatalog:
    """Read-only view over the shipped features and the current build log."""

    def __init__(self, features: list[Feature], build_log: list[LogEntry] | None = None) -> None:
        seen: set[str] = set()
        for feature in features:
            if feature.id in seen:
                raise ValueError(f"Duplicate feature id in catalog: {feature.id}")
            seen.add(feature.id)
        self._features = list(features)
        self._by_id = {feature.id: feature for feature in self._features}
        self._build_log = list(build_log or [])

    @classmethod
    def from_document(cls, document: Any, *, schema_path: Path = SCHEMA_PATH) -> FeatureCatalog:
        """Validate a raw catalog document and convert it to domain types."""
        schema = json.loads(schema_path.read_text(encoding="utf-8"))
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(document), key=str)
        if errors:
            details = "; ".join(err.message for err in errors)
            raise ValueError(f"Invalid feature catalog: {details}")

        features = [_feature_from_raw(raw) for raw in document["features"]]
        build_log = [
            LogEntry(
                time=str(raw["time"]),
                message=str(raw["message"]),
                highlight=bool(raw.get("highlight", False)),
            )
            for raw in document.get("build_log", [])
        ]
        return cls(features, build_log)

    @classmethod
    def from_path(cls, path: str | Path) -> FeatureCatalog:
        catalog_path = Path(path)
        with catalog_path.open("r", encoding="utf-8") as file_handle:
            document = json.load(file_handle)
        catalog = cls.from_document(document)
        logger.info("catalog_loaded path=%s features=%d", catalog_path, len(catalog))
        return catalog

    @classmethod
    def load_default(cls) -> FeatureCatalog:
        return cls.from_path(DEFAULT_CATALOG_PATH)

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self._features)

    @property
    def build_log(self) -> list[LogEntry]:
        return list(self._build_log)

    def all(self) -> list[Feature]:
        return list(self._features)

    def released(self) -> list[Feature]:
        """Released features in catalog order."""
        return [feature for feature in self._features if feature.released]

    def sorted_by_day(self, *, released_only: bool = True) -> list[Feature]:
        pool = self.released() if released_only else self.all()
        return sorted(pool, key=lambda feature: feature.day)

    def get(self, feature_id: str) -> Feature | None:
        return self._by_id.get(feature_id)


def _feature_from_raw(raw: dict[str, Any]) -> Feature:
    released_at_raw = raw.get("released_at")
    released_at = None
    if released_at_raw:
        try:
            released_at = datetime.fromisoformat(str(released_at_raw))
        except ValueError as exc:
            raise ValueError(
                f"Invalid released_at for feature {raw['id']!r}: {released_at_raw!r}"
            ) from exc
    return Feature(
        id=str(raw["id"]),
        day=int(raw["day"]),
        title=str(raw["title"]),
        emoji=str(raw["emoji"]),
        description=str(raw["description"]),
        released=bool(raw.get("released", True)),
        released_at=released_at,
    )
