"""
Mock Azure SDK clients for testing.

Fake paged listings and gallery operations that behave like the
azure-mgmt-compute operation groups nodeimage calls, without network access.
"""

from datetime import datetime
from typing import Any
from unittest.mock import Mock


class MockItemPaged:
    """Mock azure.core.paging.ItemPaged backed by explicit pages.

    Args:
        pages: Items per page
        fail_on_page: Raise ``error`` when this (0-based) page is requested
        error: Exception to raise
    """

    def __init__(
        self,
        pages: list[list[Any]],
        fail_on_page: int | None = None,
        error: Exception | None = None,
    ):
        self.pages = pages
        self.fail_on_page = fail_on_page
        self.error = error or Exception("page request failed")
        self.pages_fetched = 0

    def by_page(self):
        for index, page in enumerate(self.pages):
            if index == self.fail_on_page:
                raise self.error
            self.pages_fetched += 1
            yield iter(page)

    def __iter__(self):
        for page in self.by_page():
            yield from page


def community_version(name: str, published: datetime) -> Mock:
    """Mock CommunityGalleryImageVersion."""
    version = Mock()
    version.name = name
    version.published_date = published
    return version


def gallery_image_version(image_id: str, published: datetime) -> Mock:
    """Mock GalleryImageVersion."""
    version = Mock()
    version.id = image_id
    version.name = image_id.rsplit("/", 1)[-1]
    version.publishing_profile = Mock(published_date=published)
    return version


class MockCommunityGalleryImageVersionsOperations:
    """Mock ``community_gallery_image_versions`` operation group."""

    def __init__(self, pages: list[list[Any]] | None = None, **paged_kwargs: Any):
        self.pages = pages or []
        self.paged_kwargs = paged_kwargs
        self.list_calls: list[dict[str, str]] = []
        self.last_pager: MockItemPaged | None = None

    def list(self, location: str, public_gallery_name: str, gallery_image_name: str):
        self.list_calls.append(
            {
                "location": location,
                "public_gallery_name": public_gallery_name,
                "gallery_image_name": gallery_image_name,
            }
        )
        self.last_pager = MockItemPaged(self.pages, **self.paged_kwargs)
        return self.last_pager


class MockGalleryImageVersionsOperations:
    """Mock ``gallery_image_versions`` operation group."""

    def __init__(
        self,
        pages: list[list[Any]] | None = None,
        pinned: dict[str, Any] | None = None,
        get_error: Exception | None = None,
        **paged_kwargs: Any,
    ):
        self.pages = pages or []
        self.pinned = pinned or {}
        self.get_error = get_error
        self.paged_kwargs = paged_kwargs
        self.get_calls: list[tuple[str, str, str, str]] = []
        self.list_calls: list[tuple[str, str, str]] = []

    def get(
        self,
        resource_group_name: str,
        gallery_name: str,
        gallery_image_name: str,
        gallery_image_version_name: str,
    ):
        self.get_calls.append(
            (resource_group_name, gallery_name, gallery_image_name, gallery_image_version_name)
        )
        if self.get_error is not None:
            raise self.get_error
        return self.pinned[gallery_image_version_name]

    def list_by_gallery_image(
        self, resource_group_name: str, gallery_name: str, gallery_image_name: str
    ):
        self.list_calls.append((resource_group_name, gallery_name, gallery_image_name))
        return MockItemPaged(self.pages, **self.paged_kwargs)


class MockComputeManagementClient:
    """Mock Azure ComputeManagementClient."""

    def __init__(
        self,
        subscription_id: str = "sub-id",
        community_versions: MockCommunityGalleryImageVersionsOperations | None = None,
        gallery_versions: MockGalleryImageVersionsOperations | None = None,
    ):
        self.subscription_id = subscription_id
        self.community_gallery_image_versions = (
            community_versions or MockCommunityGalleryImageVersionsOperations()
        )
        self.gallery_image_versions = gallery_versions or MockGalleryImageVersionsOperations()


class MockCredentialFactory:
    """Mock CredentialFactory handing out a fixed compute client."""

    def __init__(
        self, client: MockComputeManagementClient | None = None, error: Exception | None = None
    ):
        self.client = client or MockComputeManagementClient()
        self.error = error
        self.subscriptions: list[str] = []

    def credential(self):
        return MockAzureCredential()

    def compute_client(self, subscription_id: str):
        self.subscriptions.append(subscription_id)
        if self.error is not None:
            raise self.error
        return self.client


class MockAzureCredential:
    """Mock Azure DefaultAzureCredential."""

    def __init__(self, token: str = "fake-token-12345"):  # noqa: S107 - test fixture
        self.token = token
        self.scopes: list[str] = []

    def get_token(self, *scopes):
        """Return a fake token."""
        self.scopes.extend(scopes)
        return Mock(token=self.token, expires_on=9999999999)


class MockNodeImageVersionsClient:
    """Mock NodeImageVersionsClient counting list calls."""

    def __init__(self, versions: list[Any] | None = None, error: Exception | None = None):
        self.versions = versions or []
        self.error = error
        self.list_calls: list[tuple[str, str]] = []

    def list(self, location: str, subscription_id: str):
        self.list_calls.append((location, subscription_id))
        if self.error is not None:
            raise self.error
        return list(self.versions)
