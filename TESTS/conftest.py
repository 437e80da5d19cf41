from __future__ import annotations

import json

import pytest

# Faux objets requests: aucune sonde de test ne touche le réseau.


class FakeResponse:
    def __init__(self, status_code=200, body=b"", headers=None, chunk=7):
        self.status_code = status_code
        self.body = body if isinstance(body, bytes) else body.encode("utf-8")
        self.headers = headers or {}
        self.chunk = chunk
        self.bytes_served = 0
        self.closed = False

    def iter_content(self, chunk_size=1024):
        step = min(self.chunk, chunk_size)
        for i in range(0, len(self.body), step):
            part = self.body[i:i + step]
            self.bytes_served += len(part)
            yield part

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class FakeSession:
    """Répond selon `routes` {url: FakeResponse | Exception}; enregistre chaque appel."""

    def __init__(self, routes=None, calls=None):
        self.routes = routes or {}
        self.calls = [] if calls is None else calls
        self.headers = {}

    def _answer(self, method, url, kwargs):
        self.calls.append((method, url, kwargs, dict(self.headers)))
        answer = self.routes.get(url)
        if answer is None:
            raise AssertionError(f"unexpected request: {method} {url}")
        if isinstance(answer, Exception):
            raise answer
        return answer

    def head(self, url, **kwargs):
        return self._answer("HEAD", url, kwargs)

    def get(self, url, **kwargs):
        return self._answer("GET", url, kwargs)

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class NoNetworkSession(FakeSession):
    def __init__(self):
        raise AssertionError("a session must not be opened for this URL")


@pytest.fixture
def fake_routes():
    return {}


@pytest.fixture
def session_calls():
    return []


@pytest.fixture
def session_factory(fake_routes, session_calls):
    return lambda: FakeSession(fake_routes, session_calls)


@pytest.fixture
def playlist_body():
    return "#EXTM3U\n#EXT-X-VERSION:3\n#EXT-X-TARGETDURATION:6\nseg1.ts\n"


@pytest.fixture
def catalog_file(tmp_path):
    def _write(records, name="canales.json"):
        path = tmp_path / name
        path.write_text(json.dumps(records), encoding="utf-8")
        return path
    return _write
