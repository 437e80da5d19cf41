from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..settings import DOWN_LOG_APPEND
from ..storage import CatalogStore
from .m3u import render_m3u
from .models import Reports
from .reports import render_down_log

# Écriture des trois artefacts; chaque écriture est isolée des autres.

logger = logging.getLogger(__name__)

CATALOG = "catalog"
DOWN_LOG = "down_log"
PLAYLIST = "playlist"


@dataclass
class SinkResult:
    name: str
    path: Path
    written: bool = False
    skipped: bool = False
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def _run_sink(name: str, path: Path, write: Callable[[], None]) -> SinkResult:
    try:
        write()
    except (OSError, ValueError) as e:
        logger.error("failed to write %s to %s: %s", name, path, e)
        return SinkResult(name, path, error=f"{type(e).__name__}: {e}")
    return SinkResult(name, path, written=True)


def write_catalog(reports: Reports, path: Path) -> SinkResult:
    store = CatalogStore(path)
    return _run_sink(CATALOG, store.path, lambda: store.save(reports.catalog))


def write_down_log(reports: Reports, path: Path, mode: str = DOWN_LOG_APPEND) -> SinkResult:
    """Sans chaîne tombée, rien n'est écrit et un log existant reste intact."""
    path = Path(path)
    if not reports.down_entries:
        return SinkResult(DOWN_LOG, path, skipped=True)

    text = render_down_log(reports.down_entries, reports.generated_at)

    def write():
        path.parent.mkdir(parents=True, exist_ok=True)
        file_mode = "a" if mode == DOWN_LOG_APPEND else "w"
        with path.open(file_mode, encoding="utf-8") as f:
            f.write(text)

    return _run_sink(DOWN_LOG, path, write)


def write_playlist(reports: Reports, path: Path) -> SinkResult:
    path = Path(path)
    if not reports.playlist_entries:
        return SinkResult(PLAYLIST, path, skipped=True)

    text = render_m3u(reports.playlist_entries)

    def write():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    return _run_sink(PLAYLIST, path, write)


def write_all(reports: Reports, settings) -> list[SinkResult]:
    return [
        write_catalog(reports, settings.catalog_path),
        write_down_log(reports, settings.down_log_path, settings.down_log_mode),
        write_playlist(reports, settings.playlist_path),
    ]
