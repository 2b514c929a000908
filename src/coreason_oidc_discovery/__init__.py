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
OpenID Connect provider discovery: fetches and validates `.well-known/openid-configuration`.
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .cancellation import CancelSignal
from .client import DiscoveryClient, DiscoveryClientAsync
from .config import DiscoverySettings
from .exceptions import (
    DiscoveryCancelledError,
    ErrorKind,
    FieldRule,
    InvalidIssuerError,
    IssuerMismatchError,
    MetadataFieldError,
    MetadataNotAnObjectError,
    OIDCDiscoveryError,
    UnexpectedStatusError,
)
from .models import ProviderMetadata, RawProviderMetadata
from .options import DiscoveryOptions
from .parsed import parse_provider_metadata, retrieve_parsed_metadata, retrieve_provider_metadata
from .raw import build_discovery_url, retrieve_raw_metadata, retrieve_raw_provider_metadata

__all__ = [
    "CancelSignal",
    "DiscoveryCancelledError",
    "DiscoveryClient",
    "DiscoveryClientAsync",
    "DiscoveryOptions",
    "DiscoverySettings",
    "ErrorKind",
    "FieldRule",
    "InvalidIssuerError",
    "IssuerMismatchError",
    "MetadataFieldError",
    "MetadataNotAnObjectError",
    "OIDCDiscoveryError",
    "ProviderMetadata",
    "RawProviderMetadata",
    "UnexpectedStatusError",
    "build_discovery_url",
    "parse_provider_metadata",
    "retrieve_parsed_metadata",
    "retrieve_provider_metadata",
    "retrieve_raw_metadata",
    "retrieve_raw_provider_metadata",
]
