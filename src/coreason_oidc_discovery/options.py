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
Options accepted by the provider metadata retrieval functions.
"""

import httpx
from pydantic import BaseModel, ConfigDict, Field

from coreason_oidc_discovery.cancellation import CancelSignal

DEFAULT_TIMEOUT = 5.0


class DiscoveryOptions(BaseModel):
    """
    Per-call discovery options. Immutable.

    Attributes:
        transport (httpx.AsyncBaseTransport | None): Transport used for the metadata request.
            Defaults to httpx's standard transport.
        signal (CancelSignal | None): Lets the caller cancel the request.
        timeout (float | None): Request timeout in seconds. `None` disables it.
        set_defaults (bool): Fill in standard-defined defaults for absent optional properties.
        validate_issuer_origin_only (bool): Only compare the origin of the issuer. Non-standard,
            needed for Microsoft Entra ID whose issuer contains a `{tenantid}` placeholder.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    transport: httpx.AsyncBaseTransport | None = None
    signal: CancelSignal | None = None
    timeout: float | None = Field(default=DEFAULT_TIMEOUT, gt=0)
    set_defaults: bool = False
    validate_issuer_origin_only: bool = False
