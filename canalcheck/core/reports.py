from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from .models import AnnotatedChannel, DownEntry, PlaylistEntry, Reports

# Dérive les trois vues d'un passage (catalogue annoté, chaînes tombées, playlist active).

TS_FORMAT = "%Y-%m-%d %H:%M:%S"
DIVIDER = "-" * 40


def build_reports(annotated: Iterable[AnnotatedChannel], now: Optional[datetime] = None) -> Reports:
    """
    Filtre (sans retrier) le catalogue annoté en entrées "down" et entrées playlist.
    Une chaîne tombe dans exactement une des deux listes.
    """
    catalog = list(annotated)
    generated_at = now or datetime.now()

    down: List[DownEntry] = []
    playlist: List[PlaylistEntry] = []
    for a in catalog:
        ch = a.channel
        if a.active:
            playlist.append(PlaylistEntry(title=ch.title, url=str(ch.url).strip(), icon=ch.icon))
        else:
            down.append(
                DownEntry(
                    checked_at=generated_at,
                    id=ch.id,
                    title=ch.title,
                    url=ch.url,
                    reason=a.verdict.reason,
                )
            )
    return Reports(generated_at=generated_at, catalog=catalog, down_entries=down, playlist_entries=playlist)


def format_down_entry(entry: DownEntry) -> str:
    lines = [
        f"[{entry.checked_at.strftime(TS_FORMAT)}] ID {entry.id}: {entry.title}",
        f"URL: {'' if entry.url is None else entry.url}",
    ]
    if entry.reason:
        lines.append(f"Reason: {entry.reason}")
    return "\n".join(lines)


def render_down_log(entries: Iterable[DownEntry], generated_at: datetime) -> str:
    """En-tête horodaté puis un bloc par chaîne, chaque bloc suivi d'un séparateur."""
    parts = [f"Down channels - generated at {generated_at.strftime(TS_FORMAT)}", DIVIDER]
    for entry in entries:
        parts.append(format_down_entry(entry))
        parts.append(DIVIDER)
    return "\n".join(parts) + "\n"
