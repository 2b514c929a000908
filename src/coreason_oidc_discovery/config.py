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
Environment-backed configuration for the coreason-oidc-discovery package.
"""

import httpx
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from coreason_oidc_discovery.cancellation import CancelSignal
from coreason_oidc_discovery.options import DEFAULT_TIMEOUT, DiscoveryOptions


class DiscoverySettings(BaseSettings):
    """
    Discovery settings read from `OIDC_DISCOVERY_*` environment variables.

    Attributes:
        issuer (str | None): The issuer to discover (e.g. https://accounts.google.com).
        http_timeout (float): Timeout in seconds for the metadata request.
        set_defaults (bool): Fill in standard-defined defaults for absent properties.
        validate_issuer_origin_only (bool): Only compare the issuer origin (Microsoft Entra ID).
    """

    model_config = SettingsConfigDict(
        env_prefix="OIDC_DISCOVERY_",
        case_sensitive=False,
    )

    issuer: str | None = None
    http_timeout: float = Field(default=DEFAULT_TIMEOUT, description="Timeout in seconds for the metadata request.")
    set_defaults: bool = False
    validate_issuer_origin_only: bool = False

    @field_validator("issuer")
    @classmethod
    def strip_issuer(cls, v: str | None) -> str | None:
        """
        Strips surrounding whitespace; an empty issuer counts as unset.
        """
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("http_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout must be greater than 0")
        return v

    def to_options(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        signal: CancelSignal | None = None,
    ) -> DiscoveryOptions:
        """
        Builds per-call options from these settings.

        Args:
            transport: Optional transport override.
            signal: Optional cancellation signal.

        Returns:
            DiscoveryOptions: The options.
        """
        return DiscoveryOptions(
            transport=transport,
            signal=signal,
            timeout=self.http_timeout,
            set_defaults=self.set_defaults,
            validate_issuer_origin_only=self.validate_issuer_origin_only,
        )
