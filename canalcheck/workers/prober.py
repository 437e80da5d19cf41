from __future__ import annotations

import logging
from typing import Any, Callable
from urllib.parse import urlparse

import requests

from ..core.m3u import M3U_HEADER, is_playlist_body
from ..core.models import Verdict
from ..settings import DEFAULT_USER_AGENT, STRATEGY_CONTENT, STRATEGY_HEAD, STRATEGIES

# Sonde HTTP d'une URL de flux: HEAD seul, ou GET borné avec validation du contenu M3U.

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Any]

CHUNK_SIZE = 1024


def is_well_formed(url: Any) -> bool:
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def status_ok(status_code: int) -> bool:
    return 200 <= status_code < 300


class StreamProber:
    """
    Réduit la réponse HTTP d'une URL à un Verdict.
    `probe` ne lève jamais: toute erreur devient un verdict négatif avec sa raison.
    """

    def __init__(
        self,
        strategy: str = STRATEGY_CONTENT,
        timeout_s: float = 5.0,
        max_bytes: int = 10 * 1024,
        min_body_length: int = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        session_factory: SessionFactory = requests.Session,
    ):
        if strategy not in STRATEGIES:
            raise ValueError(f"unknown strategy: {strategy!r}")
        self.strategy = strategy
        self.timeout_s = float(timeout_s)
        self.max_bytes = int(max_bytes)
        self.min_body_length = int(min_body_length)
        self.user_agent = user_agent
        self.session_factory = session_factory

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "StreamProber":
        return cls(
            strategy=settings.strategy,
            timeout_s=settings.effective_timeout,
            max_bytes=settings.max_bytes,
            min_body_length=settings.min_body_length,
            user_agent=settings.user_agent,
            **kwargs,
        )

    def probe(self, url: Any) -> Verdict:
        if not is_well_formed(url):
            return Verdict.ko("invalid url")
        url = url.strip()

        try:
            with self.session_factory() as session:
                session.headers.update({"User-Agent": self.user_agent})
                if self.strategy == STRATEGY_HEAD:
                    verdict = self._probe_head(session, url)
                else:
                    verdict = self._probe_content(session, url)
        except requests.exceptions.Timeout:
            verdict = Verdict.ko("timeout")
        except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema):
            verdict = Verdict.ko("invalid url")
        except requests.exceptions.ConnectionError as e:
            verdict = Verdict.ko(f"connection error ({type(e).__name__})")
        except requests.exceptions.RequestException as e:
            verdict = Verdict.ko(f"request failed ({type(e).__name__})")
        except Exception as e:
            verdict = Verdict.ko(f"unexpected error ({type(e).__name__}: {e})")

        logger.debug("probe %s [%s] -> %s (%s)", url, self.strategy, verdict.is_active, verdict.reason)
        return verdict

    def _probe_head(self, session, url: str) -> Verdict:
        r = session.head(url, allow_redirects=True, timeout=self.timeout_s)
        if status_ok(r.status_code):
            return Verdict.ok(f"HEAD {r.status_code}")
        return Verdict.ko(f"HTTP {r.status_code}")

    def _probe_content(self, session, url: str) -> Verdict:
        with session.get(url, stream=True, allow_redirects=True, timeout=self.timeout_s) as r:
            if not status_ok(r.status_code):
                return Verdict.ko(f"HTTP {r.status_code}")

            declared = (r.headers or {}).get("Content-Length")
            if declared and declared.isdigit() and int(declared) > self.max_bytes:
                return Verdict.ko(f"response too large ({declared} > {self.max_bytes} bytes)")

            # Lecture bornée: on ne télécharge jamais plus que max_bytes (+1 chunk).
            buf = bytearray()
            for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                buf.extend(chunk)
                if len(buf) > self.max_bytes:
                    return Verdict.ko(f"response too large (> {self.max_bytes} bytes)")

        return self.check_body(bytes(buf))

    def check_body(self, body: bytes) -> Verdict:
        text = body.decode("utf-8", errors="replace")
        if not text.strip():
            return Verdict.ko("empty body")
        if len(text) < self.min_body_length:
            return Verdict.ko(f"body too short ({len(text)} < {self.min_body_length} chars)")
        if not is_playlist_body(text):
            return Verdict.ko(f"missing {M3U_HEADER} header")
        return Verdict.ok(f"GET 2xx, {len(body)} bytes")
