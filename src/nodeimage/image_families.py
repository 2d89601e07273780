"""Image families and default image selection.

Each image family owns an ordered catalog of default images. Catalogs are
authored most-preferred first; selection returns the first entry whose
requirements the instance type is compatible with.

Public API:
    ImageFamily: Protocol for image family catalogs
    Ubuntu2204, AzureLinux, CustomImages: Supported image families
    get_image_family: Look up a family by name
    select_default_image: First compatible catalog entry for an instance type
"""

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from nodeimage.exceptions import ValidationError
from nodeimage.models import (
    AZURELINUX_IMAGE_FAMILY,
    CUSTOM_IMAGE_FAMILY,
    DISTRO_AZURELINUX_V2_GEN1,
    DISTRO_AZURELINUX_V2_GEN2,
    DISTRO_AZURELINUX_V2_GEN2_ARM64,
    DISTRO_UBUNTU2204_GEN1,
    DISTRO_UBUNTU2204_GEN2,
    DISTRO_UBUNTU2204_GEN2_ARM64,
    UBUNTU2204_IMAGE_FAMILY,
    DefaultImageDescriptor,
    InstanceType,
)
from nodeimage.requirements import (
    ARCHITECTURE_AMD64,
    ARCHITECTURE_ARM64,
    HYPERV_GENERATION_V1,
    HYPERV_GENERATION_V2,
    LABEL_ARCH,
    LABEL_SKU_HYPERV_GENERATION,
    Operator,
    Requirement,
    Requirements,
)

logger = logging.getLogger(__name__)

# Community galleries
AKS_UBUNTU_PUBLIC_GALLERY_URL = "AKSUbuntu-38d80f77-467a-481f-a8d4-09b6d4220bd2"
AKS_AZURELINUX_PUBLIC_GALLERY_URL = "AKSAzureLinux-f7c7cda5-1c9a-4bdc-a222-9614c968580b"

# Shared galleries
AKS_UBUNTU_RESOURCE_GROUP = "AKS-Ubuntu"
AKS_UBUNTU_GALLERY_NAME = "AKSUbuntu"
AKS_AZURELINUX_RESOURCE_GROUP = "AKS-AzureLinux"
AKS_AZURELINUX_GALLERY_NAME = "AKSAzureLinux"

# Image definitions
UBUNTU2204_GEN2_IMAGE = "2204gen2containerd"
UBUNTU2204_GEN1_IMAGE = "2204containerd"
UBUNTU2204_GEN2_ARM64_IMAGE = "2204gen2arm64containerd"
AZURELINUX_GEN2_IMAGE = "V2gen2"
AZURELINUX_GEN1_IMAGE = "V2"
AZURELINUX_GEN2_ARM64_IMAGE = "V2gen2arm64"

# Placeholder for the custom family, whose images come from CustomImageTerm
USER_DEFINED = "UserDefined"


def _arch_and_generation(arch: str, generation: str) -> Requirements:
    return Requirements(
        Requirement.new(LABEL_ARCH, Operator.IN, arch),
        Requirement.new(LABEL_SKU_HYPERV_GENERATION, Operator.IN, generation),
    )


@runtime_checkable
class ImageFamily(Protocol):
    """Protocol for image family catalogs."""

    @property
    def name(self) -> str: ...

    def default_images(self) -> Sequence[DefaultImageDescriptor]:
        """Catalog entries, most preferred first."""
        ...


class Ubuntu2204:
    """Ubuntu 22.04 node images."""

    name = UBUNTU2204_IMAGE_FAMILY

    _DEFAULT_IMAGES = (
        DefaultImageDescriptor(
            public_gallery_url=AKS_UBUNTU_PUBLIC_GALLERY_URL,
            gallery_resource_group=AKS_UBUNTU_RESOURCE_GROUP,
            gallery_name=AKS_UBUNTU_GALLERY_NAME,
            image_definition=UBUNTU2204_GEN2_IMAGE,
            requirements=_arch_and_generation(ARCHITECTURE_AMD64, HYPERV_GENERATION_V2),
            distro=DISTRO_UBUNTU2204_GEN2,
        ),
        DefaultImageDescriptor(
            public_gallery_url=AKS_UBUNTU_PUBLIC_GALLERY_URL,
            gallery_resource_group=AKS_UBUNTU_RESOURCE_GROUP,
            gallery_name=AKS_UBUNTU_GALLERY_NAME,
            image_definition=UBUNTU2204_GEN1_IMAGE,
            requirements=_arch_and_generation(ARCHITECTURE_AMD64, HYPERV_GENERATION_V1),
            distro=DISTRO_UBUNTU2204_GEN1,
        ),
        DefaultImageDescriptor(
            public_gallery_url=AKS_UBUNTU_PUBLIC_GALLERY_URL,
            gallery_resource_group=AKS_UBUNTU_RESOURCE_GROUP,
            gallery_name=AKS_UBUNTU_GALLERY_NAME,
            image_definition=UBUNTU2204_GEN2_ARM64_IMAGE,
            requirements=_arch_and_generation(ARCHITECTURE_ARM64, HYPERV_GENERATION_V2),
            distro=DISTRO_UBUNTU2204_GEN2_ARM64,
        ),
    )

    def default_images(self) -> Sequence[DefaultImageDescriptor]:
        return self._DEFAULT_IMAGES


class AzureLinux:
    """Azure Linux 2.0 node images."""

    name = AZURELINUX_IMAGE_FAMILY

    _DEFAULT_IMAGES = (
        DefaultImageDescriptor(
            public_gallery_url=AKS_AZURELINUX_PUBLIC_GALLERY_URL,
            gallery_resource_group=AKS_AZURELINUX_RESOURCE_GROUP,
            gallery_name=AKS_AZURELINUX_GALLERY_NAME,
            image_definition=AZURELINUX_GEN2_IMAGE,
            requirements=_arch_and_generation(ARCHITECTURE_AMD64, HYPERV_GENERATION_V2),
            distro=DISTRO_AZURELINUX_V2_GEN2,
        ),
        DefaultImageDescriptor(
            public_gallery_url=AKS_AZURELINUX_PUBLIC_GALLERY_URL,
            gallery_resource_group=AKS_AZURELINUX_RESOURCE_GROUP,
            gallery_name=AKS_AZURELINUX_GALLERY_NAME,
            image_definition=AZURELINUX_GEN1_IMAGE,
            requirements=_arch_and_generation(ARCHITECTURE_AMD64, HYPERV_GENERATION_V1),
            distro=DISTRO_AZURELINUX_V2_GEN1,
        ),
        DefaultImageDescriptor(
            public_gallery_url=AKS_AZURELINUX_PUBLIC_GALLERY_URL,
            gallery_resource_group=AKS_AZURELINUX_RESOURCE_GROUP,
            gallery_name=AKS_AZURELINUX_GALLERY_NAME,
            image_definition=AZURELINUX_GEN2_ARM64_IMAGE,
            requirements=_arch_and_generation(ARCHITECTURE_ARM64, HYPERV_GENERATION_V2),
            distro=DISTRO_AZURELINUX_V2_GEN2_ARM64,
        ),
    )

    def default_images(self) -> Sequence[DefaultImageDescriptor]:
        return self._DEFAULT_IMAGES


class CustomImages:
    """Family for user-defined images.

    The single catalog entry only pins the baseline requirements; distro and
    image come from the node class's custom image term.
    """

    name = CUSTOM_IMAGE_FAMILY

    _DEFAULT_IMAGES = (
        DefaultImageDescriptor(
            public_gallery_url=USER_DEFINED,
            image_definition=USER_DEFINED,
            requirements=_arch_and_generation(ARCHITECTURE_AMD64, HYPERV_GENERATION_V2),
            distro=DISTRO_UBUNTU2204_GEN2,
        ),
    )

    def default_images(self) -> Sequence[DefaultImageDescriptor]:
        return self._DEFAULT_IMAGES


_IMAGE_FAMILIES: dict[str, type] = {
    UBUNTU2204_IMAGE_FAMILY: Ubuntu2204,
    AZURELINUX_IMAGE_FAMILY: AzureLinux,
    CUSTOM_IMAGE_FAMILY: CustomImages,
}


def get_image_family(name: str | None) -> ImageFamily:
    """Look up an image family by name.

    Args:
        name: Family name; None selects Ubuntu2204

    Returns:
        ImageFamily instance

    Raises:
        ValidationError: If the family is unknown

    Example:
        >>> get_image_family("AzureLinux").name
        'AzureLinux'
    """
    family_cls = _IMAGE_FAMILIES.get(name or UBUNTU2204_IMAGE_FAMILY)
    if family_cls is None:
        raise ValidationError(
            f"Unsupported image family: '{name}'. Supported: {', '.join(_IMAGE_FAMILIES)}"
        )
    return family_cls()


def select_default_image(
    catalog: Sequence[DefaultImageDescriptor], instance_type: InstanceType
) -> DefaultImageDescriptor | None:
    """Pick the first catalog entry compatible with the instance type.

    Well-known and restricted labels the instance type leaves undefined do
    not count as mismatches.

    Args:
        catalog: Catalog entries in preference order
        instance_type: Candidate instance type

    Returns:
        Matching entry, or None if nothing matches
    """
    for descriptor in catalog:
        if instance_type.compatible(descriptor.requirements):
            return descriptor
        logger.debug(
            f"Image {descriptor.image_definition} incompatible with instance type "
            f"{instance_type.name}"
        )
    return None


__all__ = [
    "AKS_AZURELINUX_GALLERY_NAME",
    "AKS_AZURELINUX_PUBLIC_GALLERY_URL",
    "AKS_AZURELINUX_RESOURCE_GROUP",
    "AKS_UBUNTU_GALLERY_NAME",
    "AKS_UBUNTU_PUBLIC_GALLERY_URL",
    "AKS_UBUNTU_RESOURCE_GROUP",
    "AZURELINUX_GEN1_IMAGE",
    "AZURELINUX_GEN2_ARM64_IMAGE",
    "AZURELINUX_GEN2_IMAGE",
    "UBUNTU2204_GEN1_IMAGE",
    "UBUNTU2204_GEN2_ARM64_IMAGE",
    "UBUNTU2204_GEN2_IMAGE",
    "USER_DEFINED",
    "AzureLinux",
    "CustomImages",
    "ImageFamily",
    "Ubuntu2204",
    "get_image_family",
    "select_default_image",
]
