import json
import os
import sys

# Add src to path for running directly
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

import anyio

from coreason_oidc_discovery import DiscoverySettings, retrieve_raw_metadata


async def main(issuers: list[str]) -> None:
    """
    Prints the raw metadata document of every issuer given on the command line.
    """
    options = DiscoverySettings().to_options()
    for issuer in issuers:
        metadata = await retrieve_raw_metadata(issuer, options)
        print(json.dumps(metadata, indent=2))
        print()


if __name__ == "__main__":
    issuers = sys.argv[1:]
    if not issuers:
        env_issuer = DiscoverySettings().issuer
        issuers = [env_issuer] if env_issuer else []

    if not issuers:
        print("issuer URL(s) required!", file=sys.stderr)
        print(file=sys.stderr)
        print("USAGE:", file=sys.stderr)
        print("\tpython examples/get_issuer_metadata.py <issuer URL>...", file=sys.stderr)
        sys.exit(1)

    anyio.run(main, issuers)
