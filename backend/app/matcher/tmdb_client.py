# tmdb_client.py
import time
from collections.abc import Callable
from functools import wraps
from threading import Lock
from typing import Any, TypeVar

import requests
from loguru import logger

from app.core.errors import ConfigurationError, MetadataError
from app.matcher.models import Candidate, EpisodeDetails, MovieDetails, SeriesDetails

F = TypeVar("F", bound=Callable[..., Any])

TMDB_API_URL = "https://api.themoviedb.org/3"


def retry_network_operation(max_retries: int = 3, base_delay: float = 1.0) -> Callable[[F], F]:
    """Decorator for retrying network operations."""

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            last_exception = None
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except (requests.RequestException, ConnectionError, TimeoutError) as e:
                    last_exception = e
                    if attempt == max_retries:
                        logger.error(
                            f"Max retries ({max_retries}) exceeded for {func.__name__}: {e}"
                        )
                        raise e

                    logger.warning(
                        f"Network retry {attempt + 1}/{max_retries + 1} for {func.__name__}: {e}"
                    )
                    time.sleep(delay)
                    delay = min(delay * 2, 30)  # Cap at 30 seconds

            raise last_exception

        return wrapper  # type: ignore

    return decorator


class RateLimitedRequest:
    """
    A class that represents a rate-limited request object.

    Attributes:
        rate_limit (int): Maximum number of requests allowed per period.
        period (int): Period in seconds.
        requests_made (int): Counter for requests made.
        start_time (float): Start time of the current period.
        lock (Lock): Lock for synchronization.
    """

    def __init__(self, rate_limit=30, period=1):
        self.rate_limit = rate_limit
        self.period = period
        self.requests_made = 0
        self.start_time = time.time()
        self.lock = Lock()

    def get(self, url, headers=None, params=None, timeout=30):
        """
        Sends a rate-limited GET request to the specified URL.

        Args:
            url (str): The URL to send the request to.
            headers (dict): Request headers.
            params (dict): Query parameters.
            timeout (float): Socket timeout in seconds.

        Returns:
            Response: The response object returned by the request.
        """
        with self.lock:
            if self.requests_made >= self.rate_limit:
                sleep_time = self.period - (time.time() - self.start_time)
                if sleep_time > 0:
                    time.sleep(sleep_time)
                self.requests_made = 0
                self.start_time = time.time()

            self.requests_made += 1

        return requests.get(url, headers=headers, params=params, timeout=timeout)


def build_auth(api_key: str) -> tuple[dict, dict]:
    """Build headers and base params for TMDB auth.

    Returns:
        (headers, params) tuple
    """
    headers = {}
    params = {}
    if len(api_key) > 40:  # v4 JWT token
        headers["Authorization"] = f"Bearer {api_key}"
    else:  # v3 API key
        params["api_key"] = api_key
    return headers, params


class TmdbClient:
    """Synchronous TMDB client implementing the metadata provider contract.

    When no ``api_key`` is given the key is read from the stored AppConfig on
    every call, so updating it in Settings takes effect without a restart.
    """

    def __init__(
        self,
        api_key: str | None = None,
        language: str = "en-US",
        rate_limiter: RateLimitedRequest | None = None,
        base_url: str = TMDB_API_URL,
        timeout: float = 30,
    ) -> None:
        self._api_key = api_key
        self.language = language
        self._requests = rate_limiter or RateLimitedRequest(rate_limit=30, period=1)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _resolve_api_key(self) -> str:
        if self._api_key is not None:
            api_key = self._api_key
        else:
            from app.services.config_service import get_config_sync

            api_key = get_config_sync().tmdb_api_key

        api_key = api_key.strip()
        if not api_key:
            raise ConfigurationError("TMDB API key not configured")
        return api_key

    @retry_network_operation(max_retries=3, base_delay=1.0)
    def _get(self, path: str, params: dict | None = None) -> dict:
        headers, auth_params = build_auth(self._resolve_api_key())
        query = {**auth_params, "language": self.language, **(params or {})}
        url = f"{self._base_url}{path}"

        response = self._requests.get(url, headers=headers, params=query, timeout=self._timeout)
        if response.status_code == 404:
            # Not transient: don't let the retry decorator spin on it
            raise MetadataError(f"TMDB resource not found: {path}")
        if response.status_code in (401, 403):
            raise ConfigurationError(f"TMDB rejected the API key ({response.status_code})")
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.error(f"HTTP Error {response.status_code} for {path}: {response.text[:200]}")
            raise e
        return response.json()

    def search_movie(self, title: str, year: int | None = None) -> list[Candidate]:
        """Search movies by title, narrowed to a release year when known."""
        params: dict = {"query": title, "include_adult": "false"}
        if year:
            params["year"] = year

        results = self._get("/search/movie", params).get("results", [])
        logger.debug(f"TMDB movie search for '{title}' ({year}): {len(results)} results")
        return [Candidate.from_movie_result(r) for r in results]

    def search_series(self, name: str) -> list[Candidate]:
        """Search tv shows by name."""
        results = self._get("/search/tv", {"query": name}).get("results", [])
        logger.debug(f"TMDB tv search for '{name}': {len(results)} results")
        return [Candidate.from_tv_result(r) for r in results]

    def get_movie_details(self, movie_id: int) -> MovieDetails:
        """Fetch movie details from TMDB by ID."""
        return MovieDetails.model_validate(self._get(f"/movie/{movie_id}"))

    def get_series_details(self, series_id: int) -> SeriesDetails:
        """Fetch show details from TMDB by ID."""
        return SeriesDetails.model_validate(self._get(f"/tv/{series_id}"))

    def get_episode_details(
        self, series_id: int, season_number: int, episode_number: int
    ) -> EpisodeDetails:
        """Fetch a single episode of a show from TMDB."""
        data = self._get(f"/tv/{series_id}/season/{season_number}/episode/{episode_number}")
        # Older payloads omit the numbers; fall back to what was asked for
        data.setdefault("season_number", season_number)
        data.setdefault("episode_number", episode_number)
        return EpisodeDetails.model_validate(data)
