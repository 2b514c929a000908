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
Custom exceptions for the coreason-oidc-discovery package.

Network failures are not represented here: errors raised by httpx (DNS, TLS,
connection resets, timeouts) reach the caller unchanged.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Failure category carried by every discovery error as `kind`."""

    INVALID_ISSUER = "invalid_issuer"
    UNEXPECTED_STATUS = "unexpected_status"
    MALFORMED_BODY = "malformed_body"
    ISSUER_MISMATCH = "issuer_mismatch"
    FIELD_VALIDATION = "field_validation"
    CANCELLED = "cancelled"


class FieldRule(StrEnum):
    """The rule a metadata property violated."""

    MISSING = "missing"
    INVALID_URL = "invalid_url"
    NOT_AN_ARRAY = "not_an_array"
    NON_STRING_ELEMENT = "non_string_element"


class OIDCDiscoveryError(Exception):
    """Base exception for all coreason-oidc-discovery errors."""

    kind: ErrorKind


class InvalidIssuerError(OIDCDiscoveryError, ValueError):
    """Raised when the issuer supplied by the caller is not an absolute URL."""

    kind = ErrorKind.INVALID_ISSUER

    def __init__(self, issuer: str, reason: str) -> None:
        self.issuer = issuer
        self.reason = reason
        super().__init__(f"Invalid issuer URL '{issuer}': {reason}")


class UnexpectedStatusError(OIDCDiscoveryError):
    """Raised when the metadata endpoint answers with anything but 200."""

    kind = ErrorKind.UNEXPECTED_STATUS

    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"Incorrect status from metadata endpoint {url}. Expected 200, got {status_code}")


class MetadataNotAnObjectError(OIDCDiscoveryError, TypeError):
    """
    Raised when the metadata endpoint returns valid JSON that is not an object.
    Invalid JSON surfaces as `json.JSONDecodeError` instead.
    """

    kind = ErrorKind.MALFORMED_BODY

    def __init__(self, received: str) -> None:
        self.received = received
        super().__init__(f"Provider metadata is not an object (got JSON {received})")


class IssuerMismatchError(OIDCDiscoveryError):
    """Raised when the metadata `issuer` does not belong to the requested issuer."""

    kind = ErrorKind.ISSUER_MISMATCH

    def __init__(self, expected: str, actual: str, origin_only: bool = False) -> None:
        self.expected = expected
        self.actual = actual
        self.origin_only = origin_only
        what = "Issuer origin" if origin_only else "Issuer"
        super().__init__(
            f"{what} in OIDC metadata response ({actual!r}) does not match "
            f"the issuer used to retrieve metadata ({expected!r})"
        )


class MetadataFieldError(OIDCDiscoveryError, TypeError):
    """Raised when a metadata property is missing or has the wrong type."""

    kind = ErrorKind.FIELD_VALIDATION

    def __init__(self, field: str, rule: FieldRule, detail: str) -> None:
        self.field = field
        self.rule = rule
        super().__init__(f'OIDC provider metadata property "{field}" {detail}')


class DiscoveryCancelledError(OIDCDiscoveryError):
    """Default reason raised when a `CancelSignal` is cancelled without an exception."""

    kind = ErrorKind.CANCELLED
