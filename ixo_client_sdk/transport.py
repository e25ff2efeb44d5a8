"""
JSON-over-HTTP transport shared by the directory, CellNode and chain clients.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .encoding import canonical_json
from .exceptions import TransportError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


@dataclass
class HttpResponse:
    """Decoded HTTP response: JSON when the server says so, text otherwise."""
    status: int
    headers: Any
    body: Any


def _sanitize_body(body: Any) -> Any:
    """
    Remove signatures and secrets from a request body for logging.
    """
    if isinstance(body, list):
        return [_sanitize_body(item) for item in body]
    if not isinstance(body, dict):
        return body

    result = body.copy()
    for key in ("signatureValue", "signature", "secret", "privkey", "signkey"):
        if key in result and isinstance(result[key], str):
            result[key] = f"[REDACTED - {len(result[key])} chars]"
    for key, value in result.items():
        if isinstance(value, (dict, list)):
            result[key] = _sanitize_body(value)
    return result


class Fetcher:
    """
    Small JSON HTTP helper bound to a URL prefix.

    Request bodies are encoded with the canonical JSON encoder so the bytes
    sent are the same bytes that were signed. Any non-2xx status raises
    TransportError; nothing is retried. Unless a session is passed in, no
    connection or cookie state is kept between requests.
    """

    def __init__(
        self,
        url_prefix: str = "",
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None
    ):
        """
        Args:
            url_prefix: Prepended to every path passed to fetch()
            session: Optional requests session to share connections; without
                one every request runs in its own short-lived session
            timeout: Optional timeout in seconds for every request
        """
        self.url_prefix = url_prefix
        self.session = session
        self.timeout = timeout

    def fetch(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Dict[str, str]] = None
    ) -> HttpResponse:
        """
        Perform a request and decode the response.

        Args:
            path: Path (or full URL when the prefix is empty)
            method: HTTP method
            body: Optional JSON-compatible request body
            headers: Extra headers; they override the JSON defaults

        Returns:
            HttpResponse for any 2xx status

        Raises:
            TransportError: On non-2xx status or network failure
        """
        url = self.url_prefix + path
        request_headers = {**DEFAULT_HEADERS, **(headers or {})}
        data = canonical_json(body).encode("utf-8") if body is not None else None

        logger.debug("> Request %s %s headers=%s body=%s", method, url, request_headers, _sanitize_body(body))

        try:
            requester = self.session if self.session is not None else requests
            resp = requester.request(
                method,
                url,
                data=data,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TransportError(f"Request to {url} failed: {e}") from e

        content_type = resp.headers.get("Content-Type", "")
        if content_type.startswith("application/json"):
            try:
                decoded = resp.json()
            except ValueError as e:
                raise TransportError(
                    f"Invalid JSON response from {url}: {e}",
                    status=resp.status_code,
                    headers=resp.headers,
                    body=resp.text,
                ) from e
        else:
            decoded = resp.text

        logger.debug("< Response %s status=%s body=%s", url, resp.status_code, decoded)

        if not 200 <= resp.status_code < 300:
            raise TransportError(
                f"HTTP {resp.status_code} from {method} {url}",
                status=resp.status_code,
                headers=resp.headers,
                body=decoded,
            )

        return HttpResponse(status=resp.status_code, headers=resp.headers, body=decoded)

    __call__ = fetch
