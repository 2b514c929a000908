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
Data models for the coreason-oidc-discovery package.
"""

from typing import Any, TypedDict

import httpx
from pydantic import AnyUrl, BaseModel, ConfigDict, Field

IssuerLike = str | httpx.URL | AnyUrl


class RawProviderMetadata(TypedDict, total=False):
    """
    The provider metadata document as returned by the provider.

    See https://openid.net/specs/openid-connect-discovery-1_0.html#ProviderMetadata.
    Nothing beyond the top-level JSON object shape is guaranteed; the parser checks the rest.
    """

    # Mandatory
    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    jwks_uri: str
    response_types_supported: list[str]
    subject_types_supported: list[str]
    id_token_signing_alg_values_supported: list[str]

    # Optional / recommended
    userinfo_endpoint: str
    registration_endpoint: str
    scopes_supported: list[str]
    response_modes_supported: list[str]
    grant_types_supported: list[str]
    acr_values_supported: list[str]
    id_token_encryption_alg_values_supported: list[str]
    id_token_encryption_enc_values_supported: list[str]
    userinfo_signing_alg_values_supported: list[str]
    userinfo_encryption_alg_values_supported: list[str]
    userinfo_encryption_enc_values_supported: list[str]
    request_object_signing_alg_values_supported: list[str]
    request_object_encryption_alg_values_supported: list[str]
    request_object_encryption_enc_values_supported: list[str]
    token_endpoint_auth_methods_supported: list[str]
    token_endpoint_auth_signing_alg_values_supported: list[str]
    display_values_supported: list[str]
    claim_types_supported: list[str]
    claims_supported: list[str]
    service_documentation: str
    claims_locales_supported: list[str]
    ui_locales_supported: list[str]
    claims_parameter_supported: bool
    request_parameter_supported: bool
    request_uri_parameter_supported: bool
    require_request_uri_registration: bool
    op_policy_uri: str
    op_tos_uri: str

    # Other standards and vendor extensions
    check_session_iframe: str
    end_session_endpoint: str
    code_challenge_methods_supported: list[str]
    device_authorization_endpoint: str
    introspection_endpoint: str
    introspection_endpoint_auth_methods_supported: list[str]
    revocation_endpoint: str
    revocation_endpoint_auth_methods_supported: list[str]
    frontchannel_logout_supported: bool

    # Microsoft Entra ID
    kerberos_endpoint: str
    tenant_region_scope: str | None
    cloud_instance_name: str
    cloud_graph_host_name: str
    msgraph_host: str
    rbac_url: str


class ProviderMetadata(BaseModel):
    """
    Validated and converted provider metadata.

    Optional properties the provider did not publish are `None` and are not part of
    `model_fields_set`; use `has()` to tell an absent property from an empty list.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    issuer: AnyUrl = Field(..., description="The provider's issuer URL.")
    authorization_endpoint: AnyUrl = Field(..., description="OAuth 2.0 Authorization Endpoint.")
    token_endpoint: AnyUrl = Field(..., description="OAuth 2.0 Token Endpoint.")
    jwks_uri: AnyUrl = Field(..., description="URL of the provider's JSON Web Key Set document.")
    response_types_supported: list[str] = Field(..., description="Supported OAuth 2.0 response_type values.")
    subject_types_supported: list[str] = Field(..., description="Supported subject identifier types.")
    id_token_signing_alg_values_supported: list[str] = Field(
        ..., description="JWS `alg` values supported for the ID Token."
    )

    userinfo_endpoint: AnyUrl | None = Field(default=None, description="UserInfo Endpoint.")
    registration_endpoint: AnyUrl | None = Field(
        default=None, description="Dynamic Client Registration Endpoint."
    )
    scopes_supported: list[str] | None = Field(default=None, description="Supported OAuth 2.0 scope values.")
    response_modes_supported: list[str] | None = Field(
        default=None, description="Supported OAuth 2.0 response_mode values."
    )
    grant_types_supported: list[str] | None = Field(default=None, description="Supported OAuth 2.0 grant types.")
    claims_supported: list[str] | None = Field(
        default=None, description="Claim names the provider may supply values for (may be incomplete)."
    )
    token_endpoint_auth_methods_supported: list[str] | None = Field(
        default=None, description="Client authentication methods supported by the token endpoint."
    )
    check_session_iframe: AnyUrl | None = Field(
        default=None, description="Iframe for cross-origin session state communication."
    )
    end_session_endpoint: AnyUrl | None = Field(
        default=None, description="URL where users are redirected to end their session."
    )
    code_challenge_methods_supported: list[str] | None = Field(
        default=None, description="Supported PKCE code challenge methods."
    )
    device_authorization_endpoint: AnyUrl | None = Field(
        default=None, description="Device authorization endpoint (Google, Okta, Microsoft)."
    )
    introspection_endpoint: AnyUrl | None = Field(
        default=None, description="Token introspection endpoint (Okta)."
    )
    introspection_endpoint_auth_methods_supported: list[str] | None = Field(
        default=None, description="Client authentication methods supported by the introspection endpoint."
    )
    revocation_endpoint: AnyUrl | None = Field(
        default=None, description="Endpoint to revoke access or refresh tokens (Google, Okta)."
    )
    revocation_endpoint_auth_methods_supported: list[str] | None = Field(
        default=None, description="Client authentication methods supported by the revocation endpoint."
    )

    raw: dict[str, Any] = Field(..., description="The raw metadata document, including unparsed properties.")

    def has(self, name: str) -> bool:
        """
        Whether the provider published the given property.

        Args:
            name: The field name, e.g. `userinfo_endpoint`.

        Returns:
            bool: True if the property was present in the raw document.
        """
        return name in self.model_fields_set
