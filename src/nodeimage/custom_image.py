"""Custom gallery image resolution.

Resolves a user's CustomImageTerm to a gallery image version resource ID,
either the pinned version or the most recently published one.

Public API:
    CustomImageResolver: Resolve custom image terms
    custom_image_key: Fully qualified key for a custom image term
"""

import logging

from nodeimage.credentials import CredentialFactory
from nodeimage.exceptions import NoMatchingVersionError
from nodeimage.models import CustomImageTerm
from nodeimage.shared_gallery import build_shared_image_id

logger = logging.getLogger(__name__)


def custom_image_key(term: CustomImageTerm) -> str:
    """Cache key for a custom image term.

    An unpinned term yields a key with an empty version segment.
    """
    return build_shared_image_id(
        term.gallery_subscription_id,
        term.gallery_resource_group_name,
        term.gallery_name,
        term.name,
        term.version,
    )


class CustomImageResolver:
    """Resolve custom image terms against Azure Compute Galleries.

    Args:
        credential_factory: Source of per-subscription compute clients
    """

    def __init__(self, credential_factory: CredentialFactory | None = None):
        self.credential_factory = credential_factory or CredentialFactory()

    def resolve(self, term: CustomImageTerm) -> str:
        """Resource ID of the image version the term points to.

        Args:
            term: Custom image term

        Returns:
            Gallery image version resource ID

        Raises:
            CredentialError: If no client can be built for the term's subscription
            NoMatchingVersionError: If an unpinned image has no versions
            HttpResponseError: If a gallery API call fails
        """
        client = self.credential_factory.compute_client(term.gallery_subscription_id)
        versions = client.gallery_image_versions

        if term.is_pinned:
            image_version = versions.get(
                resource_group_name=term.gallery_resource_group_name,
                gallery_name=term.gallery_name,
                gallery_image_name=term.name,
                gallery_image_version_name=term.version,
            )
            return image_version.id

        pager = versions.list_by_gallery_image(
            resource_group_name=term.gallery_resource_group_name,
            gallery_name=term.gallery_name,
            gallery_image_name=term.name,
        )
        candidate = None
        for page in pager.by_page():
            for image_version in page:
                if candidate is None or (
                    _published_date(image_version) > _published_date(candidate)
                ):
                    candidate = image_version

        if candidate is None:
            raise NoMatchingVersionError(f"{term.gallery_name}/{term.name}")
        return candidate.id


def _published_date(image_version):
    return image_version.publishing_profile.published_date


__all__ = ["CustomImageResolver", "custom_image_key"]
