# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_oidc_discovery

"""
Discovery clients bundling options and a reusable transport.
"""

from collections.abc import Awaitable, Callable
from contextlib import ExitStack
from typing import Any, TypeVar

import anyio
import httpx
from anyio.from_thread import BlockingPortal, start_blocking_portal
from opentelemetry.instrumentation.httpx import AsyncOpenTelemetryTransport

from coreason_oidc_discovery.models import IssuerLike, ProviderMetadata, RawProviderMetadata
from coreason_oidc_discovery.options import DiscoveryOptions
from coreason_oidc_discovery.parsed import retrieve_parsed_metadata
from coreason_oidc_discovery.raw import retrieve_raw_metadata

_T = TypeVar("_T")


class DiscoveryClientAsync:
    """
    Async discovery client.

    Used as an async context manager it owns an instrumented connection pool that is shared
    by all calls and closed on exit. Used without entering, every call gets a fresh transport.
    """

    def __init__(
        self,
        options: DiscoveryOptions | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the DiscoveryClientAsync.

        Args:
            options: Options applied to every call. `options.transport` is ignored if
                `transport` is given.
            transport: External transport (optional). The caller keeps ownership of it.
        """
        self.options = options or DiscoveryOptions()
        self._transport = transport or self.options.transport
        self._internal_transport = False

    async def __aenter__(self) -> "DiscoveryClientAsync":
        if self._transport is None:
            self._transport = AsyncOpenTelemetryTransport(httpx.AsyncHTTPTransport())
            self._internal_transport = True
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._internal_transport and self._transport is not None:
            await self._transport.aclose()
            self._transport = None
            self._internal_transport = False

    def _call_options(self) -> DiscoveryOptions:
        return self.options.model_copy(update={"transport": self._transport})

    async def get_raw_metadata(self, issuer: IssuerLike) -> RawProviderMetadata:
        """
        Retrieves the raw metadata document. See `retrieve_raw_metadata`.
        """
        return await retrieve_raw_metadata(issuer, self._call_options())

    async def get_metadata(self, issuer: IssuerLike) -> ProviderMetadata:
        """
        Retrieves and validates the provider metadata. See `retrieve_parsed_metadata`.
        """
        return await retrieve_parsed_metadata(issuer, self._call_options())


class DiscoveryClient:
    """
    Sync facade for DiscoveryClientAsync.

    Inside a `with` block all calls run on one event loop owned by a blocking portal, so
    pooled connections of the transport stay usable across calls. Outside of one, each call
    runs in its own event loop and the transport must not pool connections.
    """

    def __init__(
        self,
        options: DiscoveryOptions | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._async = DiscoveryClientAsync(options, transport=transport)
        self._portal: BlockingPortal | None = None
        self._exit_stack: ExitStack | None = None

    def __enter__(self) -> "DiscoveryClient":
        exit_stack = ExitStack()
        portal = exit_stack.enter_context(start_blocking_portal())
        try:
            portal.call(self._async.__aenter__)
        except BaseException:
            exit_stack.close()
            raise

        self._portal = portal
        self._exit_stack = exit_stack
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._portal is None or self._exit_stack is None:
            return

        portal, exit_stack = self._portal, self._exit_stack
        self._portal = None
        self._exit_stack = None
        with exit_stack:
            portal.call(self._async.__aexit__, exc_type, exc_val, exc_tb)

    def _run(self, func: Callable[..., Awaitable[_T]], *args: Any) -> _T:
        if self._portal is not None:
            return self._portal.call(func, *args)
        return anyio.run(func, *args)

    def get_raw_metadata(self, issuer: IssuerLike) -> RawProviderMetadata:
        return self._run(self._async.get_raw_metadata, issuer)

    def get_metadata(self, issuer: IssuerLike) -> ProviderMetadata:
        return self._run(self._async.get_metadata, issuer)
