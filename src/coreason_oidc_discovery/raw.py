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
Raw retrieval of the OIDC provider metadata document.
"""

from typing import Any, cast

import anyio
import httpx

from coreason_oidc_discovery.cancellation import CancelSignal
from coreason_oidc_discovery.exceptions import (
    DiscoveryCancelledError,
    InvalidIssuerError,
    MetadataNotAnObjectError,
    UnexpectedStatusError,
)
from coreason_oidc_discovery.models import IssuerLike, RawProviderMetadata
from coreason_oidc_discovery.options import DiscoveryOptions
from coreason_oidc_discovery.utils.logger import logger

WELL_KNOWN_PATH = ".well-known/openid-configuration"


def _standard_defaults() -> dict[str, Any]:
    # Built per call so callers never share the default lists.
    return {
        "response_modes_supported": ["query", "fragment"],
        "grant_types_supported": ["authorization_code", "implicit"],
        "token_endpoint_auth_methods_supported": ["client_secret_basic"],
        "claim_types_supported": ["normal"],
        "claims_parameter_supported": False,
        "request_parameter_supported": False,
        # The standard really does default this one to true.
        "request_uri_parameter_supported": True,
        "require_request_uri_registration": False,
    }


def parse_issuer(issuer: IssuerLike) -> httpx.URL:
    """
    Parses the issuer into an absolute URL.

    Args:
        issuer: The issuer as a string or URL.

    Returns:
        httpx.URL: The parsed issuer.

    Raises:
        InvalidIssuerError: If the issuer is not an absolute URL.
    """
    if isinstance(issuer, httpx.URL):
        url = issuer
    else:
        try:
            url = httpx.URL(str(issuer))
        except httpx.InvalidURL as e:
            raise InvalidIssuerError(str(issuer), str(e)) from e

    if not url.is_absolute_url:
        raise InvalidIssuerError(str(issuer), "an absolute URL with scheme and host is required")
    return url


def build_discovery_url(issuer: IssuerLike) -> httpx.URL:
    """
    Builds the well-known discovery URL for an issuer.

    `https://idp.example` and `https://idp.example/` produce the same URL. Credentials,
    query and fragment of the issuer are not carried over.

    Args:
        issuer: The issuer as a string or URL.

    Returns:
        httpx.URL: The discovery URL.

    Raises:
        InvalidIssuerError: If the issuer is not an absolute URL.
    """
    url = parse_issuer(issuer)
    path = url.path
    if not path.endswith("/"):
        path += "/"

    return url.copy_with(
        username=None,
        password=None,
        path=path + WELL_KNOWN_PATH,
        query=None,
        fragment=None,
    )


def apply_standard_defaults(raw_metadata: dict[str, Any]) -> dict[str, Any]:
    """
    Sets the standard-defined default values for absent optional properties, in place.

    Properties that are present, even with a falsy value, are left untouched.

    Args:
        raw_metadata: The raw metadata document.

    Returns:
        dict[str, Any]: The same document.
    """
    for key, value in _standard_defaults().items():
        if key not in raw_metadata:
            raw_metadata[key] = value
    return raw_metadata


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "array"


async def _cancel_on_signal(signal: CancelSignal, scope: anyio.CancelScope) -> None:
    await signal.wait()
    scope.cancel()


async def _get(client: httpx.AsyncClient, url: httpx.URL, signal: CancelSignal | None) -> httpx.Response:
    """
    Performs the GET request, aborting it if the signal fires while in flight.
    """
    if signal is None:
        return await client.get(url)

    response: httpx.Response | None = None
    failure: Exception | None = None

    async with anyio.create_task_group() as tg:
        tg.start_soon(_cancel_on_signal, signal, tg.cancel_scope)
        try:
            response = await client.get(url)
        except Exception as e:
            # Re-raised outside the task group so it is not wrapped in an ExceptionGroup.
            failure = e
        tg.cancel_scope.cancel()

    if failure is not None:
        raise failure
    if response is None:
        logger.info(f"Metadata request to {url} was cancelled")
        signal.raise_if_cancelled()
        raise DiscoveryCancelledError(f"Metadata request to {url} was cancelled.")  # pragma: no cover
    return response


class _BorrowedTransport(httpx.AsyncBaseTransport):
    """Forwards requests to a caller-owned transport and leaves closing it to the caller."""

    def __init__(self, transport: httpx.AsyncBaseTransport) -> None:
        self._transport = transport

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._transport.handle_async_request(request)

    async def aclose(self) -> None:
        pass


async def _fetch(url: httpx.URL, options: DiscoveryOptions) -> httpx.Response:
    # Fresh client per call, so no cookies or auth carry over between calls.
    transport = _BorrowedTransport(options.transport) if options.transport is not None else None
    async with httpx.AsyncClient(transport=transport, timeout=options.timeout, follow_redirects=True) as client:
        return await _get(client, url, options.signal)


async def retrieve_raw_metadata(
    issuer: IssuerLike,
    options: DiscoveryOptions | None = None,
) -> RawProviderMetadata:
    """
    Retrieves the raw OIDC provider metadata document for the given issuer.

    The response is not validated beyond ensuring that it is a JSON object. The request is
    attempted exactly once.

    Args:
        issuer: The issuer to discover, e.g. "https://accounts.google.com".
        options: Options to modify retrieval behavior.

    Returns:
        RawProviderMetadata: The metadata document, with defaults filled in if requested.

    Raises:
        InvalidIssuerError: If the issuer is not an absolute URL.
        UnexpectedStatusError: If the endpoint does not answer with status 200.
        json.JSONDecodeError: If the body is not valid JSON.
        MetadataNotAnObjectError: If the body is valid JSON but not an object.
        httpx.HTTPError: Transport failures, unchanged.
        BaseException: The signal's reason, if cancelled.
    """
    options = options or DiscoveryOptions()
    url = build_discovery_url(issuer)

    if options.signal is not None:
        options.signal.raise_if_cancelled()

    logger.debug(f"Fetching OIDC provider metadata from {url}")
    response = await _fetch(url, options)

    if response.status_code != 200:
        logger.warning(f"Metadata endpoint {url} returned status {response.status_code}")
        raise UnexpectedStatusError(response.status_code, str(url))

    body = response.json()
    if not isinstance(body, dict):
        received = _json_type_name(body)
        logger.warning(f"Metadata endpoint {url} returned a non-object payload ({received})")
        raise MetadataNotAnObjectError(received)

    if options.set_defaults:
        apply_standard_defaults(body)

    return cast("RawProviderMetadata", body)


retrieve_raw_provider_metadata = retrieve_raw_metadata
