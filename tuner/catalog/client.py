"""
Catalog client for Tuner.

The catalog is the remote station service that supplies track lists and
credentials. The playback engine only ever calls list(); the remaining
operations are used directly by the front end.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from tuner.catalog.models import Station, Track
from tuner.errors import ApiError

logger = logging.getLogger(__name__)


class CatalogClient(Protocol):
    """Interface the playback engine and front end depend on."""

    def list(self, station: Station) -> List[Track]:
        """Return the next ordered tracklist for the station. Raises ApiError."""
        ...

    def stations(self) -> List[Station]:
        ...

    def rate(self, station: Station, track: Track, positive: bool) -> None:
        ...

    def create(self, name: str) -> Station:
        ...

    def rename(self, station: Station, name: str) -> Station:
        ...

    def delete(self, station: Station) -> None:
        ...


class HttpCatalogClient:
    """
    Client for a JSON-over-HTTP catalog API.

    Every call is a POST to ``{base_url}/{method}`` with a JSON body. The
    service answers ``{"stat": "ok", "result": ...}`` or
    ``{"stat": "fail", "message": ..., "code": ...}``.

    This client is transport-only: it makes no decisions about retries.
    All failures are raised as ApiError.
    """

    def __init__(
        self,
        base_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize catalog client.

        Args:
            base_url: Catalog API root (e.g. https://catalog.example.com/api)
            username: Account user name (login() uses it)
            password: Account password
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self._auth_token: Optional[str] = None
        self._client = httpx.Client(timeout=timeout, transport=transport)

        # Suppress httpx INFO level logging (one line per request otherwise)
        logging.getLogger("httpx").setLevel(logging.WARNING)

        logger.info(f"[CATALOG] HttpCatalogClient initialized (url={self.base_url})")

    def close(self) -> None:
        self._client.close()

    def _post(self, method: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/{method}"
        body = dict(payload or {})
        if self._auth_token:
            body["authToken"] = self._auth_token

        try:
            response = self._client.post(url, json=body)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise ApiError(f"{method} failed: {e}") from e
        except ValueError as e:
            raise ApiError(f"{method} returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ApiError(f"{method} returned unexpected payload")
        if data.get("stat") != "ok":
            raise ApiError(data.get("message", f"{method} failed"), data.get("code"))
        return data.get("result")

    @staticmethod
    def _parse(method: str, parse, result: Any, key: str) -> list:
        if result is None:
            return []
        if not isinstance(result, dict):
            raise ApiError(f"{method} returned malformed payload: expected an object")
        try:
            return [parse(item) for item in result.get(key, [])]
        except (KeyError, TypeError, AttributeError) as e:
            raise ApiError(f"{method} returned malformed payload: {e!r}") from e

    def login(self) -> None:
        """Authenticate and keep the session token for later calls."""
        if not self.username or not self.password:
            raise ApiError("Catalog credentials are not configured")
        result = self._post("auth.userLogin", {"username": self.username, "password": self.password})
        token = (result or {}).get("userAuthToken")
        if not token:
            raise ApiError("Login response did not contain an auth token")
        self._auth_token = token
        logger.info(f"[CATALOG] Logged in as {self.username}")

    def stations(self) -> List[Station]:
        result = self._post("user.getStationList")
        return self._parse("user.getStationList", Station.from_json, result, "stations")

    def list(self, station: Station) -> List[Track]:
        result = self._post("station.getPlaylist", {"stationToken": station.station_id})
        tracks = self._parse("station.getPlaylist", Track.from_json, result, "items")
        logger.debug(f"[CATALOG] Fetched {len(tracks)} track(s) for station {station.station_id}")
        return tracks

    def rate(self, station: Station, track: Track, positive: bool) -> None:
        self._post(
            "station.addFeedback",
            {
                "stationToken": station.station_id,
                "trackToken": track.track_token or "",
                "isPositive": positive,
            },
        )

    @staticmethod
    def _station(result: Any, method: str) -> Station:
        if not isinstance(result, dict) or "stationId" not in result:
            raise ApiError(f"{method} response did not contain a station")
        try:
            return Station.from_json(result)
        except (KeyError, TypeError, AttributeError) as e:
            raise ApiError(f"{method} returned malformed payload: {e!r}") from e

    def create(self, name: str) -> Station:
        result = self._post("station.createStation", {"musicToken": name})
        return self._station(result, "station.createStation")

    def rename(self, station: Station, name: str) -> Station:
        result = self._post(
            "station.renameStation",
            {"stationToken": station.station_id, "stationName": name},
        )
        return self._station(result, "station.renameStation")

    def delete(self, station: Station) -> None:
        self._post("station.deleteStation", {"stationToken": station.station_id})
