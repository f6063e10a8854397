"""
Sample DynDNS2 client for the Dynamic Route 53 DNS service.

Reads its settings from the environment (or a .env file):

    DDNS_BASE_URL    Service URL, e.g. https://ddns.example.com
    DDNS_HOSTNAME    Managed hostname, e.g. home.example.com
    DDNS_CREDENTIAL  Update credential shown when the record was created

Requirements:
    pip install -e ".[examples]"
"""

import asyncio
import os
import sys
from typing import Optional, Tuple

import httpx
from dotenv import load_dotenv

# Responses after which retrying with the same input is pointless
FATAL_RESPONSES = {"badauth", "nohost", "abuse"}


class DDNSClient:
    """Async client that keeps one hostname pointed at this host."""

    def __init__(self, base_url: str, hostname: str, credential: str) -> None:
        """
        Initialize the client.

        Args:
            base_url: Base URL of the service
            hostname: Managed hostname to update
            credential: Update credential for the hostname
        """
        self.hostname = hostname
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            # The username slot is ignored by the service
            auth=("ddns", credential),
            headers={"User-Agent": "ddns-client-example/1.0"},
            timeout=30.0,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def public_address(self) -> str:
        """Ask the service which address it sees this host coming from."""
        response = await self.client.get("/ip")
        response.raise_for_status()
        return response.text.strip()

    async def update(self, address: Optional[str] = None) -> Tuple[str, Optional[str]]:
        """
        Send one update.

        Args:
            address: Address to bind (the source address if None)

        Returns:
            Tuple of (response code, bound address if any)
        """
        params = {"hostname": self.hostname}
        if address:
            params["myip"] = address
        response = await self.client.get("/nic/update", params=params)
        code, _, bound = response.text.strip().partition(" ")
        return code, bound or None


async def main() -> None:
    """Run a single update and report the result."""
    load_dotenv()

    base_url = os.getenv("DDNS_BASE_URL", "http://localhost:8000")
    hostname = os.getenv("DDNS_HOSTNAME")
    credential = os.getenv("DDNS_CREDENTIAL")
    if not hostname or not credential:
        print("Set DDNS_HOSTNAME and DDNS_CREDENTIAL")
        sys.exit(1)

    client = DDNSClient(base_url, hostname, credential)
    try:
        address = await client.public_address()
        print(f"Service sees this host as {address}")

        code, bound = await client.update()
        if code == "good":
            print(f"✓ {hostname} now points at {bound}")
        elif code == "nochg":
            print(f"✓ {hostname} already points at {bound}")
        elif code in FATAL_RESPONSES:
            print(f"✗ Update refused: {code}; fix the configuration before retrying")
            sys.exit(2)
        else:
            print(f"✗ Server error ({code}); retry later")
            sys.exit(1)
    finally:
        await client.close()


if __name__ == "__main__":
    asyncio.run(main())
