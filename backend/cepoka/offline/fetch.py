# FILE: cepoka/offline/fetch.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional
from urllib.parse import urljoin, urlsplit

import requests

from ..constants.offline import NETWORK_ERROR_BODY, NETWORK_ERROR_STATUS
from ..settings import NETWORK_TIMEOUT, ORIGIN_URL

# requests 가 본문을 이미 디코딩하므로 전달하면 안 되는 헤더
HOP_HEADERS = {
    "connection",
    "keep-alive",
    "transfer-encoding",
    "content-encoding",
    "content-length",
}


class NetworkError(Exception):
    """Origin could not be reached (offline, DNS, timeout...)."""


@dataclass
class FetchRequest:
    url: str
    method: str = "GET"
    mode: str = "no-cors"        # navigate | same-origin | cors | no-cors
    destination: str = ""        # document | image | script | style | ...
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_navigation(self) -> bool:
        return self.mode == "navigate"


@dataclass
class FetchResponse:
    status: int = 200
    status_text: str = "OK"
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    url: str = ""
    type: str = "basic"          # basic (same-origin) | cors | default

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def clone(self) -> "FetchResponse":
        return replace(self, headers=dict(self.headers))

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def network_error_response() -> FetchResponse:
    return FetchResponse(
        status=NETWORK_ERROR_STATUS,
        status_text="Request Timeout",
        headers={"Content-Type": "text/plain"},
        body=NETWORK_ERROR_BODY.encode("utf-8"),
        type="default",
    )


def _strip_hop_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() not in HOP_HEADERS}


class Network:
    """Fetches from the storefront origin on behalf of the edge."""

    def __init__(
        self,
        origin_url: str = ORIGIN_URL,
        timeout: float = NETWORK_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.origin_url = origin_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        parts = urlsplit(self.origin_url)
        self._origin = (parts.scheme, parts.netloc)

    def resolve(self, url: str) -> str:
        return urljoin(self.origin_url + "/", url)

    def response_type(self, url: str) -> str:
        parts = urlsplit(url)
        return "basic" if (parts.scheme, parts.netloc) == self._origin else "cors"

    def fetch(self, request: FetchRequest) -> FetchResponse:
        url = self.resolve(request.url)
        try:
            r = self.session.request(
                request.method, url, headers=request.headers or None, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NetworkError(f"{request.method} {url} failed: {e}") from e

        return FetchResponse(
            status=r.status_code,
            status_text=r.reason or "",
            headers=_strip_hop_headers(r.headers),
            body=r.content,
            url=r.url or url,
            type=self.response_type(r.url or url),
        )
