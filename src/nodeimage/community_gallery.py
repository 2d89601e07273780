"""Community Image Gallery (CIG) resolution.

Finds the newest published version of a community gallery image definition
by walking every page of the version listing.

Public API:
    CommunityGalleryResolver: Latest-version lookup for community images
    build_community_image_id: Format a community gallery image version ID
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)

COMMUNITY_IMAGE_ID_FORMAT = "/CommunityGalleries/{gallery}/images/{image}/versions/{version}"


def build_community_image_id(public_gallery_url: str, image_definition: str, version: str) -> str:
    """Format a community gallery image version resource ID.

    Example:
        >>> build_community_image_id("AKSUbuntu-38d8", "2204gen2containerd", "202410.09.0")
        '/CommunityGalleries/AKSUbuntu-38d8/images/2204gen2containerd/versions/202410.09.0'
    """
    return COMMUNITY_IMAGE_ID_FORMAT.format(
        gallery=public_gallery_url, image=image_definition, version=version
    )


class CommunityGalleryResolver:
    """Resolve community gallery images to their latest version.

    Args:
        versions_client: ``ComputeManagementClient.community_gallery_image_versions``
        location: Azure region the gallery is queried in
    """

    def __init__(self, versions_client: Any, location: str):
        self.versions_client = versions_client
        self.location = location

    def latest_version(self, public_gallery_url: str, image_definition: str) -> str:
        """Name of the most recently published version.

        Ties keep the first version seen. No versions yields an empty name.

        Args:
            public_gallery_url: Community gallery public name
            image_definition: Community image name

        Returns:
            Version name, or "" if the listing is empty

        Raises:
            HttpResponseError: If any page request fails
        """
        pager = self.versions_client.list(
            location=self.location,
            public_gallery_name=public_gallery_url,
            gallery_image_name=image_definition,
        )
        candidate = None
        pages = 0
        for page in pager.by_page():
            pages += 1
            for image_version in page:
                if candidate is None or image_version.published_date > candidate.published_date:
                    candidate = image_version

        if candidate is None:
            logger.warning(
                f"No versions published for community image {public_gallery_url}/{image_definition}"
            )
            return ""

        logger.debug(
            f"Latest version of {public_gallery_url}/{image_definition} is {candidate.name} "
            f"({pages} pages)"
        )
        return candidate.name or ""

    def image_id(self, public_gallery_url: str, image_definition: str) -> str:
        """Resource ID of the latest version of a community image."""
        version = self.latest_version(public_gallery_url, image_definition)
        return build_community_image_id(public_gallery_url, image_definition, version)


__all__ = ["COMMUNITY_IMAGE_ID_FORMAT", "CommunityGalleryResolver", "build_community_image_id"]
