"""
MongoDB Atlas Administration API client.

Programmatic API keys authenticate to the Admin API with HTTP digest
auth (public key as username, private key as password). The demo uses
it to list the clusters of a project before connecting to one.
"""
from typing import Any, Optional

import httpx

ATLAS_BASE = "https://cloud.mongodb.com/api/atlas/v2"
ATLAS_ACCEPT = "application/vnd.atlas.2023-01-01+json"


class AtlasAPI:
    """
    Async client for the Atlas Administration API.
    """

    def __init__(
        self,
        public_key: str,
        private_key: str,
        base_url: str = ATLAS_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize with an API key pair."""
        self.base_url = base_url.rstrip("/")
        self._auth = httpx.DigestAuth(public_key, private_key)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                auth=self._auth,
                headers={"Accept": ATLAS_ACCEPT},
                timeout=30.0,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AtlasAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def list_clusters(self, project_id: str) -> list[dict[str, Any]]:
        """
        List clusters in a project.

        Args:
            project_id: Atlas project (group) id

        Returns:
            Cluster descriptions from the `results` array

        Raises:
            httpx.HTTPStatusError: On a non-2xx response
        """
        client = await self._get_client()
        response = await client.get(f"{self.base_url}/groups/{project_id}/clusters")
        response.raise_for_status()
        return response.json().get("results", [])

    async def get_cluster(self, project_id: str, cluster_name: str) -> dict[str, Any]:
        """Get one cluster by name."""
        client = await self._get_client()
        response = await client.get(
            f"{self.base_url}/groups/{project_id}/clusters/{cluster_name}"
        )
        response.raise_for_status()
        return response.json()
