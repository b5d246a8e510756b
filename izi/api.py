"""HTTP client for the gitizi.com prompt API, with error translation."""

import json
import logging
import time
from urllib.parse import quote, urlencode

import httplib2

from izi import constants
from izi.config import Config
from izi.models import (
    Prompt,
    SearchResult,
    User,
    normalize_prompt,
    normalize_prompt_list,
    normalize_search,
    normalize_user,
)
from izi.util import ApiError, AuthError

logger = logging.getLogger(__name__)

_RETRY_STATUSES = {429, 500, 502, 503, 504}


def _server_message(content: bytes) -> str:
    """Pull ``message`` or ``error`` out of a JSON error body."""
    try:
        data = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return ""
    if isinstance(data, dict):
        for key in ("message", "error"):
            if isinstance(data.get(key), str):
                return data[key]
    return ""


def _translate_http_error(status: int, content: bytes, resource: str = "") -> None:
    """Raise AuthError or ApiError for a non-2xx response."""
    message = _server_message(content)

    if status in (401, 403):
        raise AuthError(
            message or "Authentication failed. Run `izi auth` to re-authenticate."
        )

    if status == 404:
        what = f"Prompt not found: {resource}" if resource else "Not found"
        raise ApiError(message or what, status=status, kind="not_found")

    if status in (400, 422):
        raise ApiError(
            message or "Request rejected by server", status=status, kind="validation"
        )

    if status == 429:
        raise ApiError(
            message or "Rate limit exceeded, try again later",
            status=status,
            kind="rate_limit",
        )

    raise ApiError(
        f"API error ({status}): {message or 'unknown error'}",
        status=status,
        kind="server",
    )


class IziClient:
    """Thin JSON-over-HTTP client. One instance per CLI invocation."""

    def __init__(
        self,
        config: Config,
        http: httplib2.Http | None = None,
        retry_attempts: int = constants.RETRY_ATTEMPTS,
        retry_delay: float = constants.RETRY_DELAY,
    ):
        self.config = config
        self.http = http or httplib2.Http(timeout=constants.API_TIMEOUT)
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay

    def _headers(self, token: str | None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
            headers["x-user-token"] = token
        return headers

    def _url(self, path: str, params: dict | None = None) -> str:
        url = self.config.api_url.rstrip("/") + path
        if params:
            url += "?" + urlencode(params)
        return url

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        payload: dict | None = None,
        resource: str = "",
        token: str | None = None,
    ):
        """Send a request and return the decoded JSON body.

        Connection failures, 429 and 5xx responses are retried with
        exponential backoff. Everything else non-2xx is translated at once.
        """
        url = self._url(path, params)
        body = json.dumps(payload) if payload is not None else None
        headers = self._headers(token or self.config.api_token)

        delay = self.retry_delay
        for attempt in range(1, self.retry_attempts + 1):
            logger.debug("%s %s (attempt %d)", method, url, attempt)
            try:
                resp, content = self.http.request(
                    url, method=method, body=body, headers=headers
                )
            except (httplib2.HttpLib2Error, OSError) as e:
                logger.debug("request failed: %s", e)
                if attempt == self.retry_attempts:
                    raise ApiError(
                        f"Network error: could not reach {self.config.api_url} ({e})",
                        kind="network",
                    )
            else:
                status = int(resp.status)
                logger.debug("%s %s -> %d", method, url, status)
                if 200 <= status < 300:
                    if not content:
                        return {}
                    try:
                        return json.loads(content.decode("utf-8"))
                    except (UnicodeDecodeError, ValueError):
                        raise ApiError(
                            "Unexpected response from server: invalid JSON",
                            status=status,
                        )
                if status not in _RETRY_STATUSES or attempt == self.retry_attempts:
                    _translate_http_error(status, content, resource)

            logger.info("retrying in %.1fs", delay)
            time.sleep(delay)
            delay *= 2

    def verify_token(self, token: str) -> User:
        """Check a token with the server, returning the user it belongs to."""
        data = self.request(
            "POST", "/auth/verify", payload={"token": token}, token=token
        )
        if isinstance(data, dict) and data.get("success") is False:
            raise AuthError(data.get("message") or "Authentication failed")
        return normalize_user(data)

    def get_current_user(self) -> User:
        if not self.config.api_token:
            raise AuthError(constants.NOT_AUTHENTICATED)
        return self.verify_token(self.config.api_token)

    def search_prompts(
        self, query: str, limit: int = constants.DEFAULT_SEARCH_LIMIT
    ) -> SearchResult:
        data = self.request(
            "GET", "/prompts/search", params={"q": query, "limit": limit}
        )
        return normalize_search(data)

    def list_user_prompts(self) -> list[Prompt]:
        return normalize_prompt_list(self.request("GET", "/prompts/me"))

    def get_prompt(self, prompt_id: str) -> Prompt:
        data = self.request(
            "GET", f"/prompts/{quote(prompt_id, safe='')}", resource=prompt_id
        )
        return normalize_prompt(data)

    def create_prompt(
        self, name: str, description: str, content: str, tags: list[str]
    ) -> Prompt:
        payload = {
            "name": name,
            "description": description,
            "content": content,
            "tags": tags,
        }
        return normalize_prompt(self.request("POST", "/prompts", payload=payload))

    def update_prompt(self, prompt_id: str, **fields) -> Prompt:
        """Update a prompt. Only fields that are not None are sent."""
        payload = {k: v for k, v in fields.items() if v is not None}
        data = self.request(
            "PUT",
            f"/prompts/{quote(prompt_id, safe='')}",
            payload=payload,
            resource=prompt_id,
        )
        return normalize_prompt(data)
