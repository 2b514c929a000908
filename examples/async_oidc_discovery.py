import asyncio
import contextlib
import os
import sys

# Add src to path for running directly
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

import httpx
from anyio import create_task_group

from coreason_oidc_discovery import DiscoveryClientAsync, DiscoveryOptions, OIDCDiscoveryError, ProviderMetadata


async def main() -> None:
    """
    Discovers several providers concurrently through one shared transport.
    """
    print(">>> Starting Async OIDC Discovery Example")

    issuers = {
        "https://accounts.google.com": DiscoveryOptions(),
        "https://login.microsoftonline.com/common/v2.0": DiscoveryOptions(validate_issuer_origin_only=True),
    }
    results: dict[str, ProviderMetadata] = {}

    async with httpx.AsyncHTTPTransport() as transport:

        async def discover(issuer: str, options: DiscoveryOptions) -> None:
            async with DiscoveryClientAsync(options, transport=transport) as client:
                try:
                    results[issuer] = await client.get_metadata(issuer)
                except (OIDCDiscoveryError, httpx.HTTPError) as e:
                    print(f">>> Discovery failed for {issuer}: {e}")

        async with create_task_group() as tg:
            for issuer, options in issuers.items():
                tg.start_soon(discover, issuer, options)

    for issuer, metadata in results.items():
        print(f"{issuer}")
        print(f"    authorization: {metadata.authorization_endpoint}")
        print(f"    token:         {metadata.token_endpoint}")
        print(f"    jwks:          {metadata.jwks_uri}")


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(main())
