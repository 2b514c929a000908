# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_oidc_discovery

import json
from collections.abc import Generator
from pathlib import Path
from typing import Any

import httpx
import pytest

from coreason_oidc_discovery.options import DiscoveryOptions

DATA_DIR = Path(__file__).parent / "data"


class RouteNotMatchedError(Exception):
    """Raised by MockRoutes for a request no route was registered for."""


class MockRoutes:
    """
    Route-matching test transport. Each registered route answers exactly one request;
    unmatched requests raise `RouteNotMatchedError` out of the transport.
    """

    def __init__(self) -> None:
        self._routes: list[tuple[str, str, int, bytes]] = []
        self.requests: list[httpx.Request] = []
        self.closed = False

    def intercept(
        self,
        url: str,
        body: Any = None,
        status: int = 200,
        method: str = "GET",
        text: str | None = None,
    ) -> None:
        content = text.encode("utf-8") if text is not None else json.dumps(body).encode("utf-8")
        self._routes.append((method, url, status, content))

    @property
    def pending(self) -> int:
        return len(self._routes)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def options(self, **kwargs: Any) -> DiscoveryOptions:
        return DiscoveryOptions(transport=self.transport, **kwargs)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        if self.closed:
            raise RuntimeError("MockRoutes used after close()")
        self.requests.append(request)
        for index, (method, url, status, content) in enumerate(self._routes):
            if method == request.method and url == str(request.url):
                del self._routes[index]
                return httpx.Response(status, content=content, headers={"Content-Type": "application/json"})
        raise RouteNotMatchedError(f"No route for {request.method} {request.url}")

    def close(self) -> None:
        self._routes.clear()
        self.closed = True

    def __enter__(self) -> "MockRoutes":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        unconsumed = [f"{method} {url}" for method, url, _, _ in self._routes]
        self.close()
        if exc_type is None:
            assert not unconsumed, f"Routes never requested: {unconsumed}"


@pytest.fixture
def mock_routes() -> Generator[MockRoutes, None, None]:
    """A MockRoutes instance whose routes must all be requested by the end of the test."""
    with MockRoutes() as routes:
        yield routes


@pytest.fixture
def minimum_metadata() -> dict[str, Any]:
    """A document holding only the mandatory properties, for issuer https://foo.bar."""
    return {
        "issuer": "https://foo.bar",
        "authorization_endpoint": "https://foo.bar/auth",
        "token_endpoint": "https://foo.bar/token",
        "jwks_uri": "https://foo.bar/jwks",
        "response_types_supported": ["response"],
        "subject_types_supported": ["subject"],
        "id_token_signing_alg_values_supported": ["id_token"],
    }


def load_provider_document(name: str) -> str:
    return (DATA_DIR / f"{name}.json").read_text(encoding="utf-8")
