"""License text lookup via the GitHub licenses API.

``GET /licenses/{key}`` returns the license template in its ``body`` field.
Those templates use ``[year]`` and ``[fullname]`` placeholders, which the
scaffolder fills with the project's values.
"""

from __future__ import annotations

import httpx

from ..config import Settings


class LicenseLookupError(Exception):
    """Raised when no license text could be obtained for an identifier."""

    def __init__(self, identifier: str | None, reason: str) -> None:
        self.identifier = identifier
        super().__init__(f"License '{identifier}' not available: {reason}")


class LicenseFetcher:
    """Async client for the license template endpoint."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or Settings()
        self.base_url = settings.license_api_url.rstrip("/")
        self.timeout = settings.http_timeout
        self._token = settings.github_token

    def _client(self) -> httpx.AsyncClient:
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(self.timeout, connect=5.0),
        )

    async def get_license(self, identifier: str | None) -> str:
        """Return the license body for an SPDX *identifier*.

        Raises:
            LicenseLookupError: If the identifier is empty, unknown to the
                API, or the API cannot be reached.
        """
        if not identifier or not identifier.strip():
            raise LicenseLookupError(identifier, "no license identifier given")

        key = identifier.strip().lower()
        try:
            async with self._client() as client:
                response = await client.get(f"/licenses/{key}")
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise LicenseLookupError(identifier, f"HTTP {exc.response.status_code}") from exc
        except httpx.TimeoutException as exc:
            raise LicenseLookupError(identifier, f"timed out after {self.timeout}s") from exc
        except httpx.HTTPError as exc:
            raise LicenseLookupError(identifier, f"request failed ({exc})") from exc
        except ValueError as exc:
            raise LicenseLookupError(identifier, "response was not JSON") from exc

        body = data.get("body") if isinstance(data, dict) else None
        if not body:
            raise LicenseLookupError(identifier, "response has no license body")
        return body
