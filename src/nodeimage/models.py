"""Data models for node image resolution.

Public API:
    DefaultImageDescriptor: One entry of an image family's catalog
    CustomImageTerm: User-authored pointer to a gallery image
    DefaultImageSource / CustomImageSource: Node class image source variants
    NodeClassSpec: The parts of a node class this package reads
    InstanceType: Candidate instance shape with scheduling requirements
"""

import re
from dataclasses import dataclass, field
from typing import Any

from nodeimage.exceptions import ValidationError
from nodeimage.requirements import Requirements

# Distros
DISTRO_UBUNTU2204_GEN2 = "aks-ubuntu-containerd-22.04-gen2"
DISTRO_UBUNTU2204_GEN1 = "aks-ubuntu-containerd-22.04"
DISTRO_UBUNTU2204_GEN2_ARM64 = "aks-ubuntu-arm64-containerd-22.04-gen2"
DISTRO_AZURELINUX_V2_GEN2 = "aks-azurelinux-v2-gen2"
DISTRO_AZURELINUX_V2_GEN1 = "aks-azurelinux-v2"
DISTRO_AZURELINUX_V2_GEN2_ARM64 = "aks-azurelinux-v2-arm64-gen2"

DEFAULT_CUSTOM_DISTRO = DISTRO_UBUNTU2204_GEN2
CUSTOM_DISTROS = (DISTRO_UBUNTU2204_GEN2, DISTRO_UBUNTU2204_GEN2_ARM64)

# Image families
UBUNTU2204_IMAGE_FAMILY = "Ubuntu2204"
AZURELINUX_IMAGE_FAMILY = "AzureLinux"
CUSTOM_IMAGE_FAMILY = "Custom"
IMAGE_FAMILIES = (UBUNTU2204_IMAGE_FAMILY, AZURELINUX_IMAGE_FAMILY, CUSTOM_IMAGE_FAMILY)

SUBSCRIPTION_ID_PATTERN = re.compile(r"^\w{8}-\w{4}-\w{4}-\w{4}-\w{12}$")


@dataclass(frozen=True)
class DefaultImageDescriptor:
    """One entry in an image family's default catalog.

    Attributes:
        image_definition: Community image name, also the shared gallery SKU
        distro: Distro identifier passed to bootstrap
        requirements: Labels an instance type must be compatible with
        public_gallery_url: Community gallery public name
        gallery_name: Shared gallery name
        gallery_resource_group: Shared gallery resource group
    """

    image_definition: str
    distro: str
    requirements: Requirements
    public_gallery_url: str = ""
    gallery_name: str = ""
    gallery_resource_group: str = ""


@dataclass(frozen=True)
class CustomImageTerm:
    """User-defined Azure Compute Gallery image.

    Attributes:
        gallery_subscription_id: Subscription owning the gallery
        gallery_resource_group_name: Gallery resource group
        gallery_name: Gallery name
        name: Image definition name in the gallery
        version: Image version; empty resolves the latest published version
        distro_name: Distro the image is built from
    """

    gallery_subscription_id: str
    gallery_resource_group_name: str
    gallery_name: str
    name: str
    version: str = ""
    distro_name: str = DEFAULT_CUSTOM_DISTRO

    def __post_init__(self):
        if not SUBSCRIPTION_ID_PATTERN.match(self.gallery_subscription_id):
            raise ValidationError(
                f"Invalid gallery subscription ID: {self.gallery_subscription_id}. "
                "Must be a GUID (xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx)."
            )
        for attr in ("gallery_resource_group_name", "gallery_name", "name"):
            if not getattr(self, attr):
                raise ValidationError(f"Custom image term requires {attr}")
        if self.distro_name not in CUSTOM_DISTROS:
            raise ValidationError(
                f"Unsupported distro name: {self.distro_name}. "
                f"Supported: {', '.join(CUSTOM_DISTROS)}"
            )

    @property
    def is_pinned(self) -> bool:
        return bool(self.version)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomImageTerm":
        """Create from a camelCase ``customImageTerm`` mapping."""
        return cls(
            gallery_subscription_id=data.get("gallerySubscriptionID", ""),
            gallery_resource_group_name=data.get("galleryResourceGroupName", ""),
            gallery_name=data.get("galleryName", ""),
            name=data.get("name", ""),
            version=data.get("version") or "",
            distro_name=data.get("distroName") or DEFAULT_CUSTOM_DISTRO,
        )


@dataclass(frozen=True)
class DefaultImageSource:
    """Resolve images from the image family's default catalog."""


@dataclass(frozen=True)
class CustomImageSource:
    """Resolve a user-defined gallery image."""

    term: CustomImageTerm


ImageSource = DefaultImageSource | CustomImageSource


@dataclass(frozen=True)
class NodeClassSpec:
    """Image-related settings of a node class.

    Attributes:
        image_family: Image family name
        image_source: Default catalog or custom image
    """

    image_family: str = UBUNTU2204_IMAGE_FAMILY
    image_source: ImageSource = field(default_factory=DefaultImageSource)

    def __post_init__(self):
        if self.image_family not in IMAGE_FAMILIES:
            raise ValidationError(
                f"Unsupported image family: {self.image_family}. "
                f"Supported: {', '.join(IMAGE_FAMILIES)}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NodeClassSpec":
        """Parse a node class ``spec`` mapping.

        An absent or empty ``customImageTerm`` selects the default catalog.

        Args:
            data: Mapping shaped like the node class spec

        Returns:
            NodeClassSpec

        Raises:
            ValidationError: If the mapping is malformed
        """
        term = data.get("customImageTerm")
        source: ImageSource
        if term and any(term.values()):
            source = CustomImageSource(term=CustomImageTerm.from_dict(term))
        else:
            source = DefaultImageSource()
        return cls(
            image_family=data.get("imageFamily") or UBUNTU2204_IMAGE_FAMILY,
            image_source=source,
        )


@dataclass(frozen=True)
class InstanceType:
    """Candidate instance shape.

    Attributes:
        name: SKU name, e.g. Standard_D4s_v5
        requirements: Labels a node of this shape will satisfy
    """

    name: str
    requirements: Requirements = field(default_factory=Requirements)

    def compatible(self, requirements: Requirements) -> bool:
        """Check the image requirements against this instance type."""
        return self.requirements.compatible(requirements, allow_undefined_well_known=True)


__all__ = [
    "AZURELINUX_IMAGE_FAMILY",
    "CUSTOM_DISTROS",
    "CUSTOM_IMAGE_FAMILY",
    "DEFAULT_CUSTOM_DISTRO",
    "DISTRO_AZURELINUX_V2_GEN1",
    "DISTRO_AZURELINUX_V2_GEN2",
    "DISTRO_AZURELINUX_V2_GEN2_ARM64",
    "DISTRO_UBUNTU2204_GEN1",
    "DISTRO_UBUNTU2204_GEN2",
    "DISTRO_UBUNTU2204_GEN2_ARM64",
    "IMAGE_FAMILIES",
    "UBUNTU2204_IMAGE_FAMILY",
    "CustomImageSource",
    "CustomImageTerm",
    "DefaultImageDescriptor",
    "DefaultImageSource",
    "ImageSource",
    "InstanceType",
    "NodeClassSpec",
]
