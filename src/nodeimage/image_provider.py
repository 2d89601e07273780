"""Image provider - picks and resolves the VM image for a new node.

Philosophy:
- One entry point (get) for provisioning decisions
- Every remote lookup goes through the image cache
- Failed lookups are never cached; callers decide whether to retry
- Caches are owned by the provider instance, not the module

Public API:
    ImageProvider: Resolution orchestrator
    shared_image_key / community_image_key: Cache keys for default images
"""

import logging
from collections.abc import Callable
from typing import Any

from nodeimage.cache import ChangeMonitor, ExpiringCache, SingleFlight
from nodeimage.community_gallery import CommunityGalleryResolver
from nodeimage.config import ImageProviderConfig
from nodeimage.credentials import CredentialFactory
from nodeimage.custom_image import CustomImageResolver, custom_image_key
from nodeimage.exceptions import NoCompatibleImageError
from nodeimage.image_families import ImageFamily, select_default_image
from nodeimage.kube_version import normalize_version
from nodeimage.models import (
    CustomImageSource,
    CustomImageTerm,
    DefaultImageDescriptor,
    InstanceType,
    NodeClassSpec,
)
from nodeimage.node_image_versions import NodeImageVersionsClient
from nodeimage.shared_gallery import SharedGalleryResolver

logger = logging.getLogger(__name__)

KUBERNETES_VERSION_CACHE_KEY = "kubernetesVersion"


def shared_image_key(descriptor: DefaultImageDescriptor) -> str:
    """Cache key for a shared gallery image: gallery/definition."""
    return f"{descriptor.gallery_name}/{descriptor.image_definition}"


def community_image_key(descriptor: DefaultImageDescriptor) -> str:
    """Cache key for a community gallery image: gallery URL/definition."""
    return f"{descriptor.public_gallery_url}/{descriptor.image_definition}"


class ImageProvider:
    """Resolve node images for instance types.

    Example:
        >>> provider = ImageProvider(config, community=cig, shared=sig, custom=custom)
        >>> distro, image_id = provider.get(node_class, instance_type, Ubuntu2204())
    """

    def __init__(
        self,
        config: ImageProviderConfig,
        community: CommunityGalleryResolver,
        shared: SharedGalleryResolver | None = None,
        custom: CustomImageResolver | None = None,
        kubernetes_version: Callable[[], str] | None = None,
        image_cache: ExpiringCache | None = None,
        kubernetes_version_cache: ExpiringCache | None = None,
        change_monitor: ChangeMonitor | None = None,
    ):
        """Initialize image provider.

        Args:
            config: Provider configuration
            community: Community gallery resolver
            shared: Shared gallery resolver (required when config.use_sig)
            custom: Custom image resolver (default: DefaultAzureCredential based)
            kubernetes_version: Callable returning the API server git version
            image_cache: Cache for resolved image IDs
            kubernetes_version_cache: Cache for the cluster version
            change_monitor: Change monitor for discovery notifications

        Raises:
            ValueError: If config.use_sig is set without a shared resolver
        """
        if config.use_sig and shared is None:
            raise ValueError("use_sig requires a shared gallery resolver")

        self.config = config
        self.community = community
        self.shared = shared
        self.custom = custom if custom is not None else CustomImageResolver()
        self._kubernetes_version = kubernetes_version
        # Empty caches are falsy, so test against None
        if image_cache is None:
            image_cache = ExpiringCache(
                ttl=config.image_cache_ttl, cleanup_interval=config.image_cache_cleanup_interval
            )
        if kubernetes_version_cache is None:
            kubernetes_version_cache = ExpiringCache(
                ttl=config.kubernetes_version_cache_ttl,
                cleanup_interval=config.image_cache_cleanup_interval,
            )
        self.image_cache = image_cache
        self.kubernetes_version_cache = kubernetes_version_cache
        self.change_monitor = change_monitor if change_monitor is not None else ChangeMonitor()
        self._flight = SingleFlight()

    @classmethod
    def from_config(
        cls,
        config: ImageProviderConfig,
        credential_factory: CredentialFactory | None = None,
        kubernetes_version: Callable[[], str] | None = None,
    ) -> "ImageProvider":
        """Build a provider wired to Azure clients.

        Args:
            config: Validated provider configuration
            credential_factory: Credential/client source (default: DefaultAzureCredential)
            kubernetes_version: Callable returning the API server git version

        Returns:
            ImageProvider

        Raises:
            ConfigError: If the configuration is incomplete
            CredentialError: If the Azure credential or client cannot be created
        """
        config.validate()
        credential_factory = credential_factory or CredentialFactory()
        compute_client = credential_factory.compute_client(config.subscription_id)

        shared = None
        if config.use_sig:
            shared = SharedGalleryResolver(
                NodeImageVersionsClient(credential_factory.credential()),
                location=config.location,
                subscription_id=config.subscription_id,
                sig_subscription_id=config.sig_subscription_id,
            )

        return cls(
            config,
            community=CommunityGalleryResolver(
                compute_client.community_gallery_image_versions, config.location
            ),
            shared=shared,
            custom=CustomImageResolver(credential_factory),
            kubernetes_version=kubernetes_version,
        )

    def get(
        self, node_class: NodeClassSpec, instance_type: InstanceType, image_family: ImageFamily
    ) -> tuple[str, str]:
        """Distro and image ID for an instance type.

        Args:
            node_class: Node class image settings
            instance_type: Candidate instance type
            image_family: Image family supplying the default catalog

        Returns:
            (distro, image_id) tuple

        Raises:
            NoCompatibleImageError: If no default image fits the instance type
            NoMatchingVersionError: If the matched image has no published version
            CredentialError: If a custom image client cannot be created
        """
        source = node_class.image_source
        if isinstance(source, CustomImageSource):
            image_id = self.get_custom_image_id(source.term)
            return source.term.distro_name, image_id

        descriptor = select_default_image(image_family.default_images(), instance_type)
        if descriptor is None:
            raise NoCompatibleImageError(instance_type.name)

        image_id = self.get_latest_image_id(descriptor)
        return descriptor.distro, image_id

    def get_latest_image_id(self, descriptor: DefaultImageDescriptor) -> str:
        """Latest image ID for a default image, cached.

        Uses the shared gallery when config.use_sig is set, the community
        gallery otherwise.
        """
        if self.config.use_sig:
            key = shared_image_key(descriptor)
            return self._cached(key, lambda: self.shared.image_id(descriptor))

        key = community_image_key(descriptor)
        return self._cached(
            key,
            lambda: self.community.image_id(
                descriptor.public_gallery_url, descriptor.image_definition
            ),
        )

    def get_custom_image_id(self, term: CustomImageTerm) -> str:
        """Image ID for a custom image term, cached under its full resource path."""
        return self._cached(custom_image_key(term), lambda: self.custom.resolve(term))

    def _cached(self, key: str, resolve: Callable[[], str]) -> str:
        image_id = self.image_cache.get(key)
        if image_id is not None:
            logger.debug(f"Image cache hit: {key}")
            return image_id

        logger.debug(f"Image cache miss: {key}")
        return self._flight.do(key, lambda: self._resolve_and_store(key, resolve))

    def _resolve_and_store(self, key: str, resolve: Callable[[], str]) -> str:
        # A waiter that arrived after the previous flight finished sees the stored value
        image_id = self.image_cache.get(key)
        if image_id is not None:
            return image_id

        image_id = resolve()
        self.image_cache.put(key, image_id)
        if self.change_monitor.has_changed(key, image_id):
            logger.info(f"discovered new image id: {image_id}")
        return image_id

    def kube_server_version(self) -> str:
        """Cluster version without the leading "v", cached.

        Raises:
            ValueError: If no version source was configured
        """
        version = self.kubernetes_version_cache.get(KUBERNETES_VERSION_CACHE_KEY)
        if version is not None:
            return version

        if self._kubernetes_version is None:
            raise ValueError("No Kubernetes version source configured")

        version = normalize_version(self._kubernetes_version())
        self.kubernetes_version_cache.put(KUBERNETES_VERSION_CACHE_KEY, version)
        if self.change_monitor.has_changed("kubernetes-version", version):
            logger.debug(f"discovered kubernetes version: {version}")
        return version

    def close(self) -> None:
        """Stop cache sweepers."""
        self.image_cache.close()
        self.kubernetes_version_cache.close()

    def __enter__(self) -> "ImageProvider":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = [
    "KUBERNETES_VERSION_CACHE_KEY",
    "ImageProvider",
    "community_image_key",
    "shared_image_key",
]
