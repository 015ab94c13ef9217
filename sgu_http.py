"""
Client HTTP minimal pour les services SGU.

Indépendant des protocoles (WMS, OGC API Features) : construit l'URL, applique
un timeout par appel et choisit JSON ou texte brut selon le Content-Type.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from sgu_errors import UpstreamApiError


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# text/xml, application/xml, application/vnd.ogc.wms_xml...
TEXT_CONTENT_TYPES = ("text/plain", "xml")


class HttpClient:
    """Client HTTP typé pour un service SGU"""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.headers = {"Accept": "application/json, text/plain, */*", **(headers or {})}
        self._transport = transport

    def build_url(self, path: str) -> str:
        # Chemin vide : URL de base telle quelle (WMS met tout dans la query string)
        if path == "":
            return self.base_url
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    async def _send(self, method: str, url: str, query: Dict[str, str], body: Any) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.request(
                method,
                url,
                params=query,
                json=body,
                headers=self.headers,
            )

    async def request(
        self,
        path: str,
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        url = self.build_url(path)
        query = {
            key: str(value)
            for key, value in (params or {}).items()
            if value is not None and value != ""
        }

        try:
            # Le timeout httpx porte sur chaque lecture ; wait_for borne l'appel entier
            response = await asyncio.wait_for(self._send(method, url, query, body), self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            logger.warning("Timeout after %ss on %s: %s", self.timeout, url, exc)
            raise UpstreamApiError(
                f"Request to the SGU service timed out after {self.timeout:g}s. "
                "The service may be slow; try again or narrow the area.",
                0,
                self.base_url,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Network error on %s: %s", url, exc)
            raise UpstreamApiError(
                "Could not reach the SGU service. It may be temporarily unavailable; try again.",
                0,
                self.base_url,
            ) from exc

        if not response.is_success:
            raise _status_error(response.status_code, response.reason_phrase, self.base_url)

        content_type = response.headers.get("content-type", "")
        if any(t in content_type for t in TEXT_CONTENT_TYPES):
            return response.text

        try:
            return response.json()
        except ValueError as exc:
            logger.warning("Unreadable response from %s (content-type %r)", url, content_type)
            raise UpstreamApiError(
                "The SGU service returned an unreadable response. Try again.",
                response.status_code,
                self.base_url,
            ) from exc


def _status_error(status_code: int, reason: str, upstream: str) -> UpstreamApiError:
    if status_code >= 500:
        message = (
            f"SGU service error ({status_code} {reason}). "
            "This is usually temporary; retry in a moment."
        )
    else:
        message = (
            f"SGU service rejected the request ({status_code} {reason}). "
            "The request is likely invalid; check the coordinates and parameters."
        )
    return UpstreamApiError(message, status_code, upstream)
