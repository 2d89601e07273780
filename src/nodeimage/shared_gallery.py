"""Shared Image Gallery (SIG) resolution.

Matches a default image's definition against the SKU of each published AKS
node image version and builds the gallery image version ID.

Public API:
    SharedGalleryResolver: Version lookup for shared gallery images
    build_shared_image_id: Format a shared gallery image version ID
"""

import logging
from typing import Any

from nodeimage.exceptions import NoMatchingVersionError
from nodeimage.models import DefaultImageDescriptor

logger = logging.getLogger(__name__)

SHARED_IMAGE_ID_FORMAT = (
    "/subscriptions/{subscription}/resourceGroups/{resource_group}"
    "/providers/Microsoft.Compute/galleries/{gallery}/images/{image}/versions/{version}"
)


def build_shared_image_id(
    subscription_id: str,
    resource_group: str,
    gallery_name: str,
    image_definition: str,
    version: str,
) -> str:
    """Format a gallery image version resource ID."""
    return SHARED_IMAGE_ID_FORMAT.format(
        subscription=subscription_id,
        resource_group=resource_group,
        gallery=gallery_name,
        image=image_definition,
        version=version,
    )


class SharedGalleryResolver:
    """Resolve default images against AKS shared galleries.

    Args:
        node_image_versions: Client with ``list(location, subscription_id)``
        location: Azure region
        subscription_id: Subscription the version listing is queried under
        sig_subscription_id: Subscription hosting the shared galleries
    """

    def __init__(
        self,
        node_image_versions: Any,
        location: str,
        subscription_id: str,
        sig_subscription_id: str,
    ):
        self.node_image_versions = node_image_versions
        self.location = location
        self.subscription_id = subscription_id
        self.sig_subscription_id = sig_subscription_id

    def image_id(self, descriptor: DefaultImageDescriptor) -> str:
        """Resource ID of the published version of a default image.

        Args:
            descriptor: Default image to resolve

        Returns:
            Gallery image version resource ID

        Raises:
            NoMatchingVersionError: If no version has the image definition as SKU
            requests.HTTPError: If the version listing fails
        """
        versions = self.node_image_versions.list(self.location, self.subscription_id)
        for version in versions:
            if version.sku == descriptor.image_definition:
                return build_shared_image_id(
                    self.sig_subscription_id,
                    descriptor.gallery_resource_group,
                    descriptor.gallery_name,
                    descriptor.image_definition,
                    version.version,
                )

        logger.debug(
            f"No node image version with SKU {descriptor.image_definition} "
            f"among {len(versions)} versions"
        )
        raise NoMatchingVersionError(descriptor.image_definition)


__all__ = ["SHARED_IMAGE_ID_FORMAT", "SharedGalleryResolver", "build_shared_image_id"]
