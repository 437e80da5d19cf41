from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .core.models import Reports
from .core.reports import build_reports
from .core.sinks import SinkResult, write_all
from .settings import Settings
from .storage import CatalogStore
from .workers.probe_worker import LogFn, ProbeFn, default_log, check_all
from .workers.prober import StreamProber

# Enchaînement d'un passage: lecture du catalogue, sondes, rapports, écritures.


@dataclass
class RunSummary:
    total: int
    active: int
    inactive: int
    reports: Reports
    sinks: list[SinkResult] = field(default_factory=list)

    @property
    def sink_failures(self) -> list[SinkResult]:
        return [s for s in self.sinks if s.failed]


def run_check(settings: Settings, probe: Optional[ProbeFn] = None, log: LogFn = default_log) -> RunSummary:
    """
    Un passage complet. Seule la lecture du catalogue peut l'interrompre (CatalogError);
    dans ce cas aucun artefact n'est écrit.
    """
    store = CatalogStore(settings.catalog_path)
    channels = store.load()

    if probe is None:
        probe = StreamProber.from_settings(settings).probe

    workers = "unbounded" if settings.max_workers is None else str(settings.max_workers)
    log(
        f"Checking {len(channels)} channels from {store.path} "
        f"(strategy={settings.strategy}, timeout={settings.effective_timeout}s, workers={workers})"
    )
    annotated = check_all(channels, probe, max_workers=settings.max_workers, log=log)

    reports = build_reports(annotated)
    sinks = write_all(reports, settings)

    summary = RunSummary(
        total=len(annotated),
        active=len(reports.playlist_entries),
        inactive=len(reports.down_entries),
        reports=reports,
        sinks=sinks,
    )
    log(f"Done: {summary.active} active, {summary.inactive} inactive, {summary.total} total.")
    for s in sinks:
        if s.written:
            log(f"  {s.name}: written to {s.path}")
        elif s.skipped:
            log(f"  {s.name}: nothing to write")
        else:
            log(f"  {s.name}: FAILED ({s.error})")
    return summary
