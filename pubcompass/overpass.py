"""Nearby pub search via the OpenStreetMap Overpass API."""

import json
import socket
import threading
import time
from typing import Callable, Optional

import requests

from .config import CONFIG
from .exceptions import (
    RetrievalError,
    RetrievalFailed,
    RetrievalHttpError,
    RetrievalMalformedResponse,
    RetrievalNetworkError,
    RetrievalTimeout,
)
from .geo import haversine_distance
from .logger import Logger
from .models import GeoPoint, InvalidElement, PointOfInterest, RetrievalQuery, parse_element


class PubFetcher:
    """Fetch pubs and bars around a location from the Overpass API.

    Each call to fetch_nearby() runs its own attempt loop with its own
    deadlines, so overlapping calls from different threads do not interact.
    """

    OVERPASS_URL = CONFIG["overpass_url"]
    TIMEOUT = CONFIG["fetch_timeout"]
    MAX_RETRIES = CONFIG["fetch_max_retries"]
    RETRY_DELAY = CONFIG["fetch_retry_delay"]

    def __init__(self, session: Optional[requests.Session] = None,
                 logger: Optional[Logger] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.session = session or requests.Session()
        self.logger = logger or Logger()
        self.sleep = sleep
        self.clock = clock

    @staticmethod
    def _format_radius(radius: float) -> str:
        return str(int(radius)) if float(radius).is_integer() else str(radius)

    @classmethod
    def build_query(cls, query: RetrievalQuery) -> str:
        """Overpass QL for pub/bar nodes and ways within the query circle"""
        around = (f"around:{cls._format_radius(query.radius_meters)},"
                  f"{query.origin.latitude},{query.origin.longitude}")
        clauses = "\n".join(
            f'  {kind}["amenity"="{amenity}"]({around});'
            for amenity in CONFIG["amenities"]
            for kind in ("node", "way")
        )
        return (
            f"[out:json][timeout:{CONFIG['overpass_query_timeout']}];\n"
            f"(\n{clauses}\n);\n"
            "out center;\n"
        )

    def fetch_nearby(self, origin: GeoPoint,
                     radius_meters: Optional[float] = None) -> list[PointOfInterest]:
        """Return pubs within radius_meters of origin, nearest first.

        Timeouts, non-2xx answers and transport errors are retried with a
        linearly growing delay. Raises RetrievalFailed once every attempt
        has failed.
        """
        if radius_meters is None:
            radius_meters = CONFIG["search_radius"]
        query = RetrievalQuery(origin=origin, radius_meters=radius_meters)
        body = self.build_query(query)

        attempts = self.MAX_RETRIES + 1
        last_error: Optional[RetrievalError] = None

        for attempt in range(attempts):
            if attempt > 0:
                delay = self.RETRY_DELAY * attempt
                self.logger.log(f"Retrying pub search in {delay:.1f}s",
                                {"attempt": attempt + 1, "of": attempts})
                self.sleep(delay)

            try:
                data = self._request(body)
            except RetrievalError as e:
                last_error = e
                self.logger.error("Pub search attempt failed", e, {"attempt": attempt + 1})
                continue

            pubs = self.parse_response(data, origin)
            self.logger.log("Pub search complete", {
                "elements": len(data["elements"]),
                "pubs": len(pubs),
                "radius": radius_meters,
            })
            return pubs

        raise RetrievalFailed(last_error, attempts) from last_error

    def _timeout_error(self) -> RetrievalTimeout:
        return RetrievalTimeout(f"Overpass API timed out after {self.TIMEOUT:g}s")

    def _request(self, body: str) -> dict:
        """Send one query and return the decoded response.

        The exchange runs on a worker thread. If it is still going when the
        attempt's time is up, the connection is shut down and the attempt
        fails with RetrievalTimeout, whether it was connecting, waiting for
        headers or reading the body.
        """
        attempt = _Attempt(deadline=self.clock() + self.TIMEOUT)
        worker = threading.Thread(target=self._run_attempt, args=(body, attempt),
                                  daemon=True, name="overpass-request")
        worker.start()

        if not attempt.done.wait(self.TIMEOUT):
            attempt.abort()
            raise self._timeout_error()
        if attempt.error is not None:
            raise attempt.error
        return attempt.data

    def _run_attempt(self, body: str, attempt: "_Attempt"):
        try:
            attempt.data = self._exchange(body, attempt)
        except Exception as e:
            # Handed back to the waiting caller, which raises it
            attempt.error = e
        finally:
            attempt.done.set()

    def _exchange(self, body: str, attempt: "_Attempt") -> dict:
        try:
            response = self.session.post(
                self.OVERPASS_URL,
                data={"data": body},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.TIMEOUT,
                stream=True,
            )
        except requests.Timeout as e:
            raise self._timeout_error() from e
        except requests.RequestException as e:
            raise RetrievalNetworkError(f"Overpass API unreachable: {e}") from e

        try:
            if not attempt.attach(response):
                raise self._timeout_error()
            if not 200 <= response.status_code < 300:
                raise RetrievalHttpError(response.status_code)
            content = self._read_body(response, attempt.deadline)
        finally:
            response.close()

        try:
            data = json.loads(content)
        except ValueError as e:
            raise RetrievalMalformedResponse(f"Invalid JSON from Overpass API: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("elements"), list):
            raise RetrievalMalformedResponse("Overpass response has no elements list")
        return data

    def _read_body(self, response: requests.Response, deadline: float) -> bytes:
        """Read the streamed body, giving up once the deadline has passed"""
        chunks = []
        try:
            for chunk in response.iter_content(chunk_size=CONFIG["fetch_chunk_size"]):
                if self.clock() > deadline:
                    raise self._timeout_error()
                chunks.append(chunk)
        except requests.Timeout as e:
            raise self._timeout_error() from e
        except requests.RequestException as e:
            raise RetrievalNetworkError(f"Overpass response interrupted: {e}") from e
        return b"".join(chunks)

    @staticmethod
    def parse_response(data: dict, origin: GeoPoint) -> list[PointOfInterest]:
        """Turn Overpass elements into pubs sorted by distance from origin.

        Elements without a usable coordinate are skipped.
        """
        pubs = []
        for raw in data.get("elements", []):
            element = parse_element(raw)
            if isinstance(element, InvalidElement):
                continue
            position = element.position
            pubs.append(PointOfInterest(
                id=element.id,
                name=element.name,
                position=position,
                distance_meters=haversine_distance(
                    origin.latitude, origin.longitude,
                    position.latitude, position.longitude
                ),
            ))
        pubs.sort(key=lambda p: p.distance_meters)
        return pubs


class _Attempt:
    """State shared between a waiting caller and its request thread"""

    def __init__(self, deadline: float):
        self.deadline = deadline
        self.done = threading.Event()
        self.data: Optional[dict] = None
        self.error: Optional[Exception] = None
        self._response: Optional[requests.Response] = None
        self._aborted = False
        self._lock = threading.Lock()

    def attach(self, response: requests.Response) -> bool:
        """Remember the open response; False if the caller already gave up"""
        with self._lock:
            if self._aborted:
                return False
            self._response = response
            return True

    def abort(self):
        with self._lock:
            self._aborted = True
            response = self._response
        if response is not None:
            _close_connection(response)


def _close_connection(response: requests.Response):
    # Shutting the socket down wakes a thread blocked in recv()
    connection = getattr(getattr(response, "raw", None), "_connection", None)
    sock = getattr(connection, "sock", None)
    if sock is not None:
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # already closed by the peer
    response.close()


def fetch_nearby_pubs(latitude: float, longitude: float,
                      radius_meters: float = CONFIG["search_radius"]) -> list[PointOfInterest]:
    """Convenience wrapper around PubFetcher.fetch_nearby()"""
    return PubFetcher().fetch_nearby(GeoPoint(latitude, longitude), radius_meters)
