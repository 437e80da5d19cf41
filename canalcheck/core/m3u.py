from __future__ import annotations

from typing import Iterable, List

from .models import PlaylistEntry

# Écriture minimaliste des playlists M3U (EXTINF + URL) et détection du marqueur #EXTM3U.

M3U_HEADER = "#EXTM3U"
BOM = "\ufeff"


def first_content_line(text: str) -> str:
    """Première ligne non vide du texte, espaces retirés ("" si aucune)."""
    for line in text.lstrip(BOM).splitlines():
        line = line.strip()
        if line:
            return line
    return ""


def is_playlist_body(text: str) -> bool:
    return first_content_line(text) == M3U_HEADER


def _one_line(value) -> str:
    # Un retour à la ligne dans un titre/logo casserait la paire EXTINF/URL.
    return " ".join(str(value or "").split())


def extinf_line(entry: PlaylistEntry) -> str:
    logo = _one_line(entry.icon).replace('"', "%22")
    return f'#EXTINF:-1 tvg-logo="{logo}",{_one_line(entry.title)}'


def entry_lines(entry: PlaylistEntry) -> List[str]:
    return [extinf_line(entry), _one_line(entry.url)]


def render_m3u(entries: Iterable[PlaylistEntry]) -> str:
    """
    Construit le texte complet d'une playlist: `#EXTM3U` puis une paire
    EXTINF/URL par entrée, dans l'ordre reçu.
    """
    lines = [M3U_HEADER]
    for entry in entries:
        lines.extend(entry_lines(entry))
    return "\n".join(lines) + "\n"
