"""AKS node image versions client.

Lists the node image versions published to AKS shared image galleries for a
region. The listing is a single (unpaginated) ARM request.

Public API:
    NodeImageVersionsClient: REST client for the nodeImageVersions endpoint
    NodeImageVersion: One published version record
"""

import logging
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeImageVersion:
    """Published node image version.

    Attributes:
        full_name: e.g. AKSUbuntu-2204gen2containerd-202410.09.0
        os: e.g. AKSUbuntu
        sku: Image definition, e.g. 2204gen2containerd
        version: e.g. 202410.09.0
    """

    full_name: str
    os: str
    sku: str
    version: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NodeImageVersion":
        return cls(
            full_name=data.get("fullName", ""),
            os=data.get("os", ""),
            sku=data.get("sku", ""),
            version=data.get("version", ""),
        )


class NodeImageVersionsClient:
    """Client for ``Microsoft.ContainerService/locations/{location}/nodeImageVersions``.

    Authenticates with a bearer token from an Azure Identity credential.

    Example:
        >>> client = NodeImageVersionsClient(DefaultAzureCredential())
        >>> versions = client.list("westus2", "00000000-0000-0000-0000-000000000000")
    """

    ARM_ENDPOINT = "https://management.azure.com"
    ARM_SCOPE = "https://management.azure.com/.default"
    API_VERSION = "2024-04-02-preview"

    def __init__(
        self,
        credential: Any,
        timeout: int = 30,
        session: requests.Session | None = None,
    ):
        """Initialize node image versions client.

        Args:
            credential: Azure Identity credential (TokenCredential)
            timeout: Request timeout in seconds (clamped to 1-300)
            session: HTTP session (default: new requests.Session)
        """
        self.credential = credential
        self.timeout = max(1, min(300, timeout))
        self.session = session or requests.Session()

    def _url(self, location: str, subscription_id: str) -> str:
        return (
            f"{self.ARM_ENDPOINT}/subscriptions/{subscription_id}/providers/"
            f"Microsoft.ContainerService/locations/{location}/nodeImageVersions"
        )

    def list(self, location: str, subscription_id: str) -> list[NodeImageVersion]:
        """List node image versions available in a region.

        Args:
            location: Azure region
            subscription_id: Subscription to query under

        Returns:
            Published node image versions

        Raises:
            requests.HTTPError: If the request fails
        """
        token = self.credential.get_token(self.ARM_SCOPE)
        response = self.session.get(
            self._url(location, subscription_id),
            params={"api-version": self.API_VERSION},
            headers={
                "Authorization": f"Bearer {token.token}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()

        values = response.json().get("values") or []
        logger.debug(f"Listed {len(values)} node image versions in {location}")
        return [NodeImageVersion.from_dict(v) for v in values]


__all__ = ["NodeImageVersion", "NodeImageVersionsClient"]
