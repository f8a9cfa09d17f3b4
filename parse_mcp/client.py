"""
HTTP dispatcher for the Parse Server REST API.

Every tool ends up here: ParseClient.request() appends a path to the
configured base URL, attaches the Parse credential headers, sends an
optional pre-serialized JSON body and returns the decoded JSON response.

Credential headers:
    X-Parse-Application-Id   always
    X-Parse-Master-Key       when the call asks for the master key and one is configured
    X-Parse-REST-API-Key     otherwise, when a REST key is configured

Exactly one of the two secret headers is sent. A call that asks for the
master key on a server configured with only a REST key falls back to the
REST key, and Parse Server then applies its normal ACL/CLP checks.

There is no retry, no backoff and, unless PARSE_REQUEST_TIMEOUT is set, no
timeout. Callers pick idempotent verbs themselves.
"""

import json
import logging
from typing import Any, Mapping
from urllib.parse import urlencode

import httpx

from parse_mcp.config import Settings
from parse_mcp.errors import UpstreamError

logger = logging.getLogger("parse-mcp.client")


def dumps_compact(value: Any) -> str:
    """Serialize like JavaScript's JSON.stringify: no whitespace, unicode kept."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def build_path(path: str, params: Mapping[str, Any] | None = None) -> str:
    """Append `params` to `path` as a query string, skipping None values."""
    query = {key: value for key, value in (params or {}).items() if value is not None}
    if not query:
        return path
    return f"{path}?{urlencode(query)}"


class ParseClient:
    """
    Stateless dispatcher bound to one Parse Server configuration.

    Args:
        settings: Connection settings (URL, app id, keys, TLS and timeout options)
        transport: Optional httpx transport. Tests pass an httpx.MockTransport
            here to stand in for Parse Server.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport

    @property
    def default_use_master_key(self) -> bool:
        """Master key is the default tier only on servers without a REST key."""
        return not self.settings.rest_key and bool(self.settings.master_key)

    def headers(self, use_master_key: bool | None = None) -> dict[str, str]:
        if use_master_key is None:
            use_master_key = self.default_use_master_key

        headers = {
            "X-Parse-Application-Id": self.settings.app_id,
            "Content-Type": "application/json",
        }
        if use_master_key and self.settings.master_key:
            headers["X-Parse-Master-Key"] = self.settings.master_key
        elif self.settings.rest_key:
            headers["X-Parse-REST-API-Key"] = self.settings.rest_key
        return headers

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: str | None = None,
        use_master_key: bool | None = None,
    ) -> Any:
        """
        Send one request to Parse Server and return the decoded JSON body.

        Args:
            path: Endpoint path including any query string, e.g. "/classes/Post?limit=5"
            method: HTTP verb
            body: Pre-serialized JSON request body
            use_master_key: Ask for the master key. None selects the default tier.

        Raises:
            UpstreamError: Parse Server answered with a non-2xx status.
        """
        url = f"{self.settings.url}{path}"
        headers = self.headers(use_master_key)
        logger.debug(
            "Parse request",
            extra={
                "log_data": {
                    "method": method,
                    "path": path,
                    "master_key": "X-Parse-Master-Key" in headers,
                }
            },
        )

        async with httpx.AsyncClient(
            transport=self._transport,
            verify=not self.settings.allow_self_signed,
            timeout=self.settings.request_timeout,
        ) as client:
            response = await client.request(method, url, headers=headers, content=body)

        if not response.is_success:
            logger.warning(
                "Parse request failed",
                extra={
                    "log_data": {
                        "method": method,
                        "path": path,
                        "status_code": response.status_code,
                    }
                },
            )
            raise UpstreamError(response.status_code, response.text)

        return response.json()

    async def request_json(
        self,
        path: str,
        method: str,
        payload: Any,
        use_master_key: bool | None = None,
    ) -> Any:
        """Shortcut for request() with a body that still needs serializing."""
        return await self.request(
            path, method=method, body=dumps_compact(payload), use_master_key=use_master_key
        )
