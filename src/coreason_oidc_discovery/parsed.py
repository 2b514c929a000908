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
Validation and conversion of the raw provider metadata into `ProviderMetadata`.
"""

from collections.abc import Mapping
from typing import Any

import httpx
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import AnyUrl, TypeAdapter, ValidationError

from coreason_oidc_discovery.exceptions import (
    FieldRule,
    IssuerMismatchError,
    MetadataFieldError,
    OIDCDiscoveryError,
)
from coreason_oidc_discovery.models import IssuerLike, ProviderMetadata, RawProviderMetadata
from coreason_oidc_discovery.options import DiscoveryOptions
from coreason_oidc_discovery.raw import parse_issuer, retrieve_raw_metadata
from coreason_oidc_discovery.utils.logger import logger

tracer = trace.get_tracer(__name__)

_url_adapter: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)

MANDATORY_URL_FIELDS = ("issuer", "authorization_endpoint", "token_endpoint", "jwks_uri")
MANDATORY_ARRAY_FIELDS = (
    "response_types_supported",
    "subject_types_supported",
    "id_token_signing_alg_values_supported",
)
OPTIONAL_URL_FIELDS = (
    "userinfo_endpoint",
    "registration_endpoint",
    "check_session_iframe",
    "end_session_endpoint",
    "device_authorization_endpoint",
    "introspection_endpoint",
    "revocation_endpoint",
)
OPTIONAL_ARRAY_FIELDS = (
    "scopes_supported",
    "response_modes_supported",
    "grant_types_supported",
    "claims_supported",
    "token_endpoint_auth_methods_supported",
    "code_challenge_methods_supported",
    "introspection_endpoint_auth_methods_supported",
    "revocation_endpoint_auth_methods_supported",
)


def ensure_url(value: Any, key: str) -> AnyUrl:
    """
    Validates that a property is an absolute URL. Any scheme is accepted.

    Args:
        value: The property value.
        key: The property name, used in the error.

    Returns:
        AnyUrl: The normalized URL.

    Raises:
        MetadataFieldError: If the value is not a string or not a parseable URL.
    """
    if not isinstance(value, str):
        raise MetadataFieldError(key, FieldRule.INVALID_URL, "is not a URL string, as required.")
    try:
        return _url_adapter.validate_python(value)
    except ValidationError as e:
        reason = e.errors()[0]["msg"]
        raise MetadataFieldError(key, FieldRule.INVALID_URL, f"is not a valid URL: {reason}") from e


def ensure_string_array(value: Any, key: str) -> list[str]:
    """
    Validates that a property is an array of strings.

    Args:
        value: The property value.
        key: The property name, used in the error.

    Returns:
        list[str]: A copy of the array.

    Raises:
        MetadataFieldError: If the value is not an array, or contains a non-string item.
    """
    if not isinstance(value, list):
        raise MetadataFieldError(key, FieldRule.NOT_AN_ARRAY, "is not an array of strings, as required.")
    for item in value:
        if not isinstance(item, str):
            raise MetadataFieldError(
                key, FieldRule.NON_STRING_ELEMENT, "does not only contain strings, as required."
            )
    return list(value)


def _require(raw_metadata: Mapping[str, Any], key: str) -> Any:
    if key not in raw_metadata:
        raise MetadataFieldError(key, FieldRule.MISSING, "is missing, but it is mandatory.")
    return raw_metadata[key]


def origin(url: httpx.URL) -> tuple[str, str, int | None]:
    """Scheme, host and effective port of a URL."""
    return url.scheme, url.host, url.port


def validate_issuer(raw_metadata: Mapping[str, Any], issuer: IssuerLike, origin_only: bool = False) -> None:
    """
    Checks that the metadata belongs to the issuer it was requested for.

    Args:
        raw_metadata: The raw metadata document.
        issuer: The issuer used to retrieve the document.
        origin_only: Only compare scheme, host and port instead of the exact string.

    Raises:
        MetadataFieldError: If `issuer` is missing, not a string, or (origin_only) not a URL.
        IssuerMismatchError: If the issuer does not match.
    """
    actual = _require(raw_metadata, "issuer")
    if not isinstance(actual, str):
        raise MetadataFieldError("issuer", FieldRule.INVALID_URL, "is not a URL string, as required.")

    expected = str(issuer)
    if not origin_only:
        if actual != expected:
            raise IssuerMismatchError(expected, actual)
        return

    try:
        actual_url = httpx.URL(actual)
    except httpx.InvalidURL as e:
        raise MetadataFieldError("issuer", FieldRule.INVALID_URL, f"is not a valid URL: {e}") from e
    if not actual_url.is_absolute_url:
        raise MetadataFieldError("issuer", FieldRule.INVALID_URL, "is not an absolute URL, as required.")

    if origin(actual_url) != origin(parse_issuer(issuer)):
        raise IssuerMismatchError(expected, actual, origin_only=True)


def parse_provider_metadata(
    raw_metadata: RawProviderMetadata | Mapping[str, Any],
    issuer: IssuerLike,
    options: DiscoveryOptions | None = None,
) -> ProviderMetadata:
    """
    Validates a raw metadata document and converts it into `ProviderMetadata`.

    Args:
        raw_metadata: The raw metadata document.
        issuer: The issuer used to retrieve the document.
        options: Only `validate_issuer_origin_only` is used here.

    Returns:
        ProviderMetadata: The parsed metadata, with `raw` set to the given document.

    Raises:
        IssuerMismatchError: If the document belongs to another issuer.
        MetadataFieldError: If a property is missing or has the wrong type.
    """
    options = options or DiscoveryOptions()
    validate_issuer(raw_metadata, issuer, origin_only=options.validate_issuer_origin_only)

    fields: dict[str, Any] = {}
    for key in MANDATORY_URL_FIELDS:
        fields[key] = ensure_url(_require(raw_metadata, key), key)
    for key in MANDATORY_ARRAY_FIELDS:
        fields[key] = ensure_string_array(_require(raw_metadata, key), key)

    # Optional properties are only set when present, keeping model_fields_set accurate.
    for key in OPTIONAL_URL_FIELDS:
        if key in raw_metadata:
            fields[key] = ensure_url(raw_metadata[key], key)
    for key in OPTIONAL_ARRAY_FIELDS:
        if key in raw_metadata:
            fields[key] = ensure_string_array(raw_metadata[key], key)

    return ProviderMetadata(**fields, raw=raw_metadata)


async def retrieve_parsed_metadata(
    issuer: IssuerLike,
    options: DiscoveryOptions | None = None,
) -> ProviderMetadata:
    """
    Retrieves and parses the OIDC provider metadata for the given issuer.

    Emits an OpenTelemetry span `retrieve_provider_metadata`.

    Args:
        issuer: The issuer to discover, e.g. "https://accounts.google.com".
        options: Options to modify retrieval and validation behavior.

    Returns:
        ProviderMetadata: The validated metadata.

    Raises:
        IssuerMismatchError: If the document belongs to another issuer.
        MetadataFieldError: If a property is missing or has the wrong type.
        Exception: Anything `retrieve_raw_metadata` raises, unchanged.
    """
    options = options or DiscoveryOptions()
    with tracer.start_as_current_span("retrieve_provider_metadata") as span:
        span.set_attribute("oidc.issuer", str(issuer))
        span.set_attribute(
            "oidc.issuer_validation", "origin" if options.validate_issuer_origin_only else "exact"
        )
        try:
            raw_metadata = await retrieve_raw_metadata(issuer, options)
            metadata = parse_provider_metadata(raw_metadata, issuer, options)
        except OIDCDiscoveryError as e:
            logger.warning(f"OIDC discovery failed for {issuer}: {e}")
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
        except Exception as e:
            logger.error(f"OIDC discovery failed for {issuer}: {e!r}")
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise

        logger.info(f"Discovered OIDC provider metadata for {metadata.issuer}")
        span.set_status(Status(StatusCode.OK))
        return metadata


retrieve_provider_metadata = retrieve_parsed_metadata
