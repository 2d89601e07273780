"""
Shared test fixtures and configuration for nodeimage tests.

This module provides common fixtures used across all test types:
- Fake clocks for cache expiry
- Mock Azure compute clients and credentials
- Sample provider configuration, instance types and custom image terms
"""

from datetime import UTC, datetime

import pytest

from nodeimage.cache import ExpiringCache
from nodeimage.config import ImageProviderConfig
from nodeimage.models import CustomImageTerm, InstanceType
from nodeimage.requirements import (
    LABEL_ARCH,
    LABEL_INSTANCE_TYPE,
    LABEL_SKU_HYPERV_GENERATION,
    Requirements,
)

SUBSCRIPTION_ID = "12345678-1234-1234-1234-123456789012"
GALLERY_SUBSCRIPTION_ID = "87654321-4321-4321-4321-210987654321"
SIG_SUBSCRIPTION_ID = "11111111-2222-3333-4444-555555555555"

# ============================================================================
# TIME FIXTURES
# ============================================================================


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    """Manually advanced clock for deterministic expiry tests."""
    return FakeClock()


@pytest.fixture
def image_cache(fake_clock):
    """Image cache on a fake clock, without a sweeper thread."""
    cache = ExpiringCache(ttl=3600, cleanup_interval=60, clock=fake_clock, start_sweeper=False)
    yield cache
    cache.close()


@pytest.fixture
def kubernetes_version_cache(fake_clock):
    """Cluster version cache on a fake clock, without a sweeper thread."""
    cache = ExpiringCache(ttl=900, cleanup_interval=60, clock=fake_clock, start_sweeper=False)
    yield cache
    cache.close()


def published(month: int, day: int = 1) -> datetime:
    """Publish date in 2024."""
    return datetime(2024, month, day, tzinfo=UTC)


# ============================================================================
# MODEL FIXTURES
# ============================================================================


@pytest.fixture
def provider_config():
    """Community gallery provider configuration."""
    return ImageProviderConfig(location="westus2", subscription_id=SUBSCRIPTION_ID)


@pytest.fixture
def sig_provider_config():
    """Shared gallery provider configuration."""
    return ImageProviderConfig(
        location="westus2",
        subscription_id=SUBSCRIPTION_ID,
        use_sig=True,
        sig_subscription_id=SIG_SUBSCRIPTION_ID,
    )


def make_instance_type(name: str = "Standard_D4s_v5", arch: str = "amd64", generation: str = "2"):
    """Instance type carrying arch and HyperV generation labels."""
    return InstanceType(
        name=name,
        requirements=Requirements.from_labels(
            {
                LABEL_ARCH: arch,
                LABEL_SKU_HYPERV_GENERATION: generation,
                LABEL_INSTANCE_TYPE: name,
            }
        ),
    )


@pytest.fixture
def amd64_gen2_instance_type():
    """Standard_D4s_v5: amd64, HyperV Gen2."""
    return make_instance_type()


@pytest.fixture
def custom_image_term():
    """Unpinned custom image term."""
    return CustomImageTerm(
        gallery_subscription_id=GALLERY_SUBSCRIPTION_ID,
        gallery_resource_group_name="images-rg",
        gallery_name="mygallery",
        name="ubuntu-hardened",
    )
