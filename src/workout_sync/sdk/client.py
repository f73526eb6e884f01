"""
Workout backend HTTP client.

Handles HTTP transport, authentication headers and response parsing.
Endpoint calls live in the sibling modules (sdk.workouts).

The backend exposes its tables through a PostgREST-style REST interface:
    GET {base_url}/rest/v1/{table}?column=eq.value&select=*&order=...
"""

import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class WorkoutApiClient:
    """
    Workout backend HTTP transport.

    Sends the project API key on every request and, when available, the
    signed-in user's access token as bearer credentials.
    """

    def __init__(
        self,
        base_url: str = "",
        api_key: str = "",
        access_token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token
        self._timeout = timeout
        self._session = requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def is_configured(self) -> bool:
        return bool(self._base_url and self._api_key)

    def set_access_token(self, token: Optional[str]) -> None:
        self._access_token = token

    def make_request(
        self,
        method: str,
        endpoint: str,
        params: Dict = None,
        json_data: Any = None,
    ) -> Any:
        """
        Make an API request.

        Args:
            method: HTTP method (GET/POST)
            endpoint: Path below the base URL (e.g. "rest/v1/workout_posts")
            params: Query parameters
            json_data: JSON body data

        Returns:
            Decoded JSON response body

        Raises:
            RuntimeError: If the client has no base URL or API key
            requests.HTTPError: On a non-2xx response
        """
        if not self.is_configured:
            raise RuntimeError("Workout API not configured. Set WORKOUT_API_URL and WORKOUT_API_KEY.")

        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token or self._api_key}",
        }

        url = f"{self._base_url}/{endpoint}"
        logger.debug("%s %s", method.upper(), url)

        if method.upper() == "GET":
            response = self._session.get(url, headers=headers, params=params, timeout=self._timeout)
        else:
            response = self._session.post(url, headers=headers, params=params, json=json_data, timeout=self._timeout)

        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        self._session.close()
