"""
jwt_bearer_flow.clients.resource

Authenticated request issuer.

Responsibilities:
- Attach the access token as a bearer credential to a single GET.
- Resolve resource paths against the instance URL returned by the token endpoint.
- Return the raw response body without schema validation.
"""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

import httpx

from jwt_bearer_flow.errors import RequestError
from jwt_bearer_flow.observability.logging import get_logger

log = get_logger(__name__)


def resolve_resource_url(resource_url: str, base_url: str) -> str:
    if urlsplit(resource_url).scheme:
        return resource_url
    return urljoin(base_url.rstrip("/") + "/", resource_url.lstrip("/"))


class ResourceClient:
    def __init__(self, *, http: httpx.Client) -> None:
        self._http = http

    def get(self, url: str, *, access_token: str) -> str:
        try:
            r = self._http.get(
                url,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/json",
                },
            )
        except httpx.HTTPError as e:
            raise RequestError(f"request to {url} failed: {e}") from e

        if not r.is_success:
            log.warning("resource_request_rejected", status=r.status_code, url=url)
            raise RequestError(
                f"resource endpoint returned HTTP {r.status_code}",
                status_code=r.status_code,
                body=r.text,
            )

        log.info("resource_fetched", url=url, status=r.status_code, bytes=len(r.content))
        return r.text


# --- Module Notes -----------------------------------------------------------
# The token is sent as-is; there is no refresh on 401 because the run is single-shot.
