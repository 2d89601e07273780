"""Kubernetes control plane version discovery.

Public API:
    KubernetesVersionDiscovery: Reads the API server version
    normalize_version: Strip the leading "v" from a git version
"""

import logging

from kubernetes import client, config

logger = logging.getLogger(__name__)


def normalize_version(git_version: str) -> str:
    """Strip a leading "v".

    Example:
        >>> normalize_version("v1.29.2")
        '1.29.2'
    """
    return git_version.removeprefix("v")


class KubernetesVersionDiscovery:
    """Read the API server version through the Kubernetes ``VersionApi``.

    Args:
        api_client: Configured ``kubernetes.client.ApiClient``; when omitted,
            in-cluster config is tried first, then the local kubeconfig.
    """

    def __init__(self, api_client: client.ApiClient | None = None):
        self._api_client = api_client

    def _version_api(self) -> client.VersionApi:
        if self._api_client is None:
            try:
                config.load_incluster_config()
            except config.ConfigException:
                logger.debug("Not running in cluster, loading kubeconfig")
                config.load_kube_config()
            self._api_client = client.ApiClient()
        return client.VersionApi(self._api_client)

    def server_version(self) -> str:
        """Git version reported by the API server, e.g. ``v1.29.2``.

        Raises:
            kubernetes.client.ApiException: If the request fails
        """
        return self._version_api().get_code().git_version


__all__ = ["KubernetesVersionDiscovery", "normalize_version"]
