from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from .core.models import AnnotatedChannel, Channel

# Persistance du catalogue de chaînes dans un fichier JSON (tableau d'objets).


class CatalogError(Exception):
    """Catalogue absent, illisible ou mal formé: le passage ne peut pas continuer."""


class CatalogStore:
    """Lecture/écriture du catalogue JSON; la lecture échoue en bloc, jamais partiellement."""
    def __init__(self, path: str | Path = "canales.json"):
        self.path = Path(path)

    def load(self) -> list[Channel]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CatalogError(f"catalog not found: {self.path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise CatalogError(f"cannot read catalog {self.path}: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CatalogError(f"invalid JSON in catalog {self.path}: {exc}") from exc

        if not isinstance(data, list):
            raise CatalogError(f"catalog {self.path} must contain a JSON array, got {type(data).__name__}")

        channels: list[Channel] = []
        for idx, rec in enumerate(data):
            if not isinstance(rec, dict):
                raise CatalogError(f"catalog entry #{idx} is not an object: {rec!r}")
            channels.append(Channel.from_record(rec))
        return channels

    def save(self, annotated: Iterable[AnnotatedChannel]) -> None:
        records = [a.to_record() for a in annotated]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
