from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

# Structures de données partagées entre stockage, workers et rapports.


@dataclass(frozen=True)
class Channel:
    """Une entrée du catalogue; `record` garde l'enregistrement JSON d'origine tel quel."""
    id: Any
    title: str
    url: Any
    icon: str = ""
    record: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_record(cls, record: dict) -> "Channel":
        title = record.get("title")
        icon = record.get("icon")
        return cls(
            id=record.get("id"),
            title="" if title is None else str(title),
            url=record.get("url"),
            icon="" if icon is None else str(icon),
            record=dict(record),
        )


@dataclass(frozen=True)
class Verdict:
    is_active: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls, reason: str | None = None) -> "Verdict":
        return cls(True, reason)

    @classmethod
    def ko(cls, reason: str) -> "Verdict":
        return cls(False, reason)


@dataclass(frozen=True)
class AnnotatedChannel:
    channel: Channel
    verdict: Verdict

    @property
    def active(self) -> bool:
        return self.verdict.is_active

    def to_record(self) -> dict:
        # Seul `active` est ajouté (ou remplacé à sa place); le reste passe tel quel.
        out = dict(self.channel.record)
        out["active"] = self.active
        return out


@dataclass(frozen=True)
class DownEntry:
    checked_at: datetime
    id: Any
    title: str
    url: Any
    reason: Optional[str] = None


@dataclass(frozen=True)
class PlaylistEntry:
    title: str
    url: str
    icon: str = ""


@dataclass(frozen=True)
class Reports:
    """Les trois vues dérivées d'un passage de vérification."""
    generated_at: datetime
    catalog: list[AnnotatedChannel]
    down_entries: list[DownEntry]
    playlist_entries: list[PlaylistEntry]
