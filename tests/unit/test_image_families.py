"""Tests for image families and default image selection."""

import pytest

from nodeimage.exceptions import ValidationError
from nodeimage.image_families import (
    AKS_UBUNTU_PUBLIC_GALLERY_URL,
    AZURELINUX_GEN2_IMAGE,
    UBUNTU2204_GEN1_IMAGE,
    UBUNTU2204_GEN2_ARM64_IMAGE,
    UBUNTU2204_GEN2_IMAGE,
    AzureLinux,
    CustomImages,
    ImageFamily,
    Ubuntu2204,
    get_image_family,
    select_default_image,
)
from nodeimage.models import DefaultImageDescriptor, InstanceType
from nodeimage.requirements import LABEL_ARCH, Requirement, Requirements
from tests.conftest import make_instance_type


class TestImageFamilies:
    """Tests for the built-in catalogs."""

    @pytest.mark.parametrize("family", [Ubuntu2204(), AzureLinux(), CustomImages()])
    def test_catalog_has_amd64_gen2_baseline(self, family):
        """Every family must serve the default amd64/Gen2 scheduling path."""
        assert isinstance(family, ImageFamily)
        assert family.default_images()
        assert select_default_image(family.default_images(), make_instance_type()) is not None

    def test_get_image_family(self):
        assert get_image_family("AzureLinux").name == "AzureLinux"
        assert get_image_family(None).name == "Ubuntu2204"

    def test_get_unknown_image_family(self):
        with pytest.raises(ValidationError, match="Unsupported image family"):
            get_image_family("Windows2022")

    def test_ubuntu_catalog_order(self):
        definitions = [d.image_definition for d in Ubuntu2204().default_images()]

        assert definitions == [
            UBUNTU2204_GEN2_IMAGE,
            UBUNTU2204_GEN1_IMAGE,
            UBUNTU2204_GEN2_ARM64_IMAGE,
        ]


class TestSelectDefaultImage:
    """Tests for select_default_image()."""

    def test_amd64_gen2(self):
        descriptor = select_default_image(Ubuntu2204().default_images(), make_instance_type())

        assert descriptor.image_definition == UBUNTU2204_GEN2_IMAGE
        assert descriptor.distro == "aks-ubuntu-containerd-22.04-gen2"
        assert descriptor.public_gallery_url == AKS_UBUNTU_PUBLIC_GALLERY_URL

    def test_amd64_gen1(self):
        descriptor = select_default_image(
            Ubuntu2204().default_images(), make_instance_type("Standard_D2_v2", generation="1")
        )

        assert descriptor.image_definition == UBUNTU2204_GEN1_IMAGE

    def test_arm64(self):
        descriptor = select_default_image(
            Ubuntu2204().default_images(), make_instance_type("Standard_D4ps_v5", arch="arm64")
        )

        assert descriptor.image_definition == UBUNTU2204_GEN2_ARM64_IMAGE
        assert descriptor.distro == "aks-ubuntu-arm64-containerd-22.04-gen2"

    def test_azure_linux(self):
        descriptor = select_default_image(AzureLinux().default_images(), make_instance_type())

        assert descriptor.image_definition == AZURELINUX_GEN2_IMAGE

    def test_first_match_wins(self):
        """When several entries match, declared order breaks the tie."""
        broad = DefaultImageDescriptor(
            image_definition="broad",
            distro="broad-distro",
            requirements=Requirements(Requirement.new(LABEL_ARCH, "In", "amd64")),
        )
        specific = DefaultImageDescriptor(
            image_definition="specific",
            distro="specific-distro",
            requirements=Requirements(Requirement.new(LABEL_ARCH, "In", "amd64", "arm64")),
        )

        assert select_default_image([broad, specific], make_instance_type()) is broad
        assert select_default_image([specific, broad], make_instance_type()) is specific

    def test_instance_type_without_labels_matches_first_entry(self):
        """Undefined well-known labels are not mismatches."""
        descriptor = select_default_image(
            Ubuntu2204().default_images(), InstanceType(name="Standard_Unlabeled")
        )

        assert descriptor.image_definition == UBUNTU2204_GEN2_IMAGE

    def test_no_match(self):
        instance_type = make_instance_type("Standard_D4ps_v5", arch="arm64", generation="1")

        assert select_default_image(Ubuntu2204().default_images(), instance_type) is None

    def test_empty_catalog(self):
        assert select_default_image([], make_instance_type()) is None
