from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, Optional

from ..core.models import AnnotatedChannel, Channel, Verdict

# Worker: sonde toutes les URLs du catalogue en parallèle et rend les verdicts dans l'ordre d'entrée.

logger = logging.getLogger(__name__)

LogFn = Callable[[str], None]
ProbeFn = Callable[[object], Verdict]


def default_log(msg: str) -> None:
    print(msg, flush=True)


def status_line(channel: Channel, verdict: Verdict) -> str:
    status = "ACTIVE (✓)" if verdict.is_active else "INACTIVE (✗)"
    return f"[{status}] ID {channel.id}: {channel.title}"


class ProbeWorker:
    """
    Fan-out/fan-in des sondes: un futur par chaîne, attente de tous, résultats rangés
    par index d'entrée (l'ordre de complétion n'apparaît jamais dans la sortie).
    """

    def __init__(
        self,
        channels: Iterable[Channel],
        probe: ProbeFn,
        max_workers: Optional[int] = None,
        log: LogFn = default_log,
    ):
        self.channels = list(channels)
        self.probe = probe
        # None: pas de limite, un thread par chaîne.
        self.max_workers = None if max_workers is None else max(1, int(max_workers))
        self.log = log

    def _pool_size(self) -> int:
        total = len(self.channels)
        if self.max_workers is None:
            return total
        return min(self.max_workers, total)

    def run(self) -> list[AnnotatedChannel]:
        total = len(self.channels)
        if not total:
            return []

        slots: list[Optional[Verdict]] = [None] * total
        with ThreadPoolExecutor(max_workers=self._pool_size()) as executor:
            future_map = {
                executor.submit(self.probe, ch.url): idx
                for idx, ch in enumerate(self.channels)
            }
            for fut in as_completed(future_map):
                idx = future_map[fut]
                try:
                    verdict = fut.result()
                except Exception as e:
                    logger.error("probe crashed for channel %r: %s", self.channels[idx].id, e)
                    verdict = Verdict.ko(f"probe crashed ({type(e).__name__})")
                slots[idx] = verdict
                try:
                    self.log(status_line(self.channels[idx], verdict))
                except Exception as e:
                    logger.debug("status line not emitted for channel %r: %s", self.channels[idx].id, e)

        return [AnnotatedChannel(ch, v) for ch, v in zip(self.channels, slots)]


def check_all(
    channels: Iterable[Channel],
    probe: ProbeFn,
    max_workers: Optional[int] = None,
    log: LogFn = default_log,
) -> list[AnnotatedChannel]:
    return ProbeWorker(channels, probe, max_workers=max_workers, log=log).run()
