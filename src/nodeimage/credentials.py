"""Credential and client factory for Azure lookups.

Custom images can live in a subscription other than the cluster's, so
compute clients are created per subscription on demand.

Philosophy:
- Delegate authentication to Azure Identity SDK (DefaultAzureCredential)
- Construction failures are reported as CredentialError, never fatal
"""

import logging
from typing import Any

from azure.identity import DefaultAzureCredential
from azure.mgmt.compute import ComputeManagementClient

from nodeimage.exceptions import CredentialError

logger = logging.getLogger(__name__)


class CredentialFactory:
    """Create Azure credentials and compute clients.

    The credential is created lazily once and shared by every client.

    Example:
        >>> factory = CredentialFactory()
        >>> client = factory.compute_client("00000000-0000-0000-0000-000000000000")
    """

    def __init__(self, credential: Any | None = None):
        """Initialize credential factory.

        Args:
            credential: Existing TokenCredential to reuse (default: create
                DefaultAzureCredential on first use)
        """
        self._credential = credential

    def credential(self) -> Any:
        """Get (creating if needed) the shared credential.

        Raises:
            CredentialError: If the credential cannot be created
        """
        if self._credential is None:
            try:
                self._credential = DefaultAzureCredential()
            except Exception as e:
                raise CredentialError(f"Failed to obtain a credential: {e}") from e
        return self._credential

    def compute_client(self, subscription_id: str) -> ComputeManagementClient:
        """Create a compute client bound to a subscription.

        Args:
            subscription_id: Azure subscription ID

        Returns:
            ComputeManagementClient

        Raises:
            CredentialError: If the credential or client cannot be created
        """
        credential = self.credential()
        try:
            client = ComputeManagementClient(credential, subscription_id)
        except Exception as e:
            raise CredentialError(
                f"Failed to create compute client for subscription {subscription_id}: {e}"
            ) from e
        logger.debug(f"Created compute client for subscription {subscription_id}")
        return client


__all__ = ["CredentialFactory"]
