import json
import threading
from unittest.mock import MagicMock

import pytest
import requests

from pubcompass.logger import Logger
from pubcompass.overpass import PubFetcher


class FakeResponse:
    """Minimal stand-in for a streamed requests.Response"""

    def __init__(self, status_code=200, body=None, chunks=None):
        self.status_code = status_code
        if chunks is None:
            payload = body if isinstance(body, bytes) else json.dumps(body or {}).encode()
            chunks = [payload]
        self._chunks = chunks
        self.closed = False

    def iter_content(self, chunk_size=1):
        for chunk in self._chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk

    def close(self):
        self.closed = True


class StalledResponse(FakeResponse):
    """Response whose body never arrives until the connection is closed"""

    def __init__(self):
        super().__init__(status_code=200, chunks=[])
        self._released = threading.Event()

    def iter_content(self, chunk_size=1):
        self._released.wait(5)
        raise requests.ConnectionError("connection closed")
        yield b""

    def close(self):
        super().close()
        self._released.set()


def overpass_response(elements=None, status_code=200):
    return FakeResponse(status_code=status_code, body={"elements": elements or []})


@pytest.fixture
def quiet_logger():
    return Logger(echo=False)


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fetcher(session, quiet_logger, sleeps):
    return PubFetcher(session=session, logger=quiet_logger, sleep=sleeps.append)
