"""Tests for node class and custom image term models."""

import pytest

from nodeimage.exceptions import ValidationError
from nodeimage.models import (
    DEFAULT_CUSTOM_DISTRO,
    DISTRO_UBUNTU2204_GEN2_ARM64,
    CustomImageSource,
    CustomImageTerm,
    DefaultImageSource,
    InstanceType,
    NodeClassSpec,
)
from nodeimage.requirements import LABEL_ARCH, Requirement, Requirements
from tests.conftest import GALLERY_SUBSCRIPTION_ID, make_instance_type

TERM_DATA = {
    "gallerySubscriptionID": GALLERY_SUBSCRIPTION_ID,
    "galleryResourceGroupName": "images-rg",
    "galleryName": "mygallery",
    "name": "ubuntu-hardened",
}


class TestCustomImageTerm:
    """Tests for CustomImageTerm validation."""

    def test_defaults(self, custom_image_term):
        assert custom_image_term.version == ""
        assert custom_image_term.is_pinned is False
        assert custom_image_term.distro_name == DEFAULT_CUSTOM_DISTRO

    def test_invalid_subscription_id(self):
        with pytest.raises(ValidationError, match="Invalid gallery subscription ID"):
            CustomImageTerm(
                gallery_subscription_id="not-a-guid",
                gallery_resource_group_name="images-rg",
                gallery_name="mygallery",
                name="ubuntu-hardened",
            )

    @pytest.mark.parametrize("missing", ["gallery_resource_group_name", "gallery_name", "name"])
    def test_required_fields(self, missing):
        values = {
            "gallery_subscription_id": GALLERY_SUBSCRIPTION_ID,
            "gallery_resource_group_name": "images-rg",
            "gallery_name": "mygallery",
            "name": "ubuntu-hardened",
        }
        values[missing] = ""

        with pytest.raises(ValidationError, match=missing):
            CustomImageTerm(**values)

    def test_unsupported_distro(self):
        with pytest.raises(ValidationError, match="Unsupported distro name"):
            CustomImageTerm(
                gallery_subscription_id=GALLERY_SUBSCRIPTION_ID,
                gallery_resource_group_name="images-rg",
                gallery_name="mygallery",
                name="ubuntu-hardened",
                distro_name="windows-2022",
            )

    def test_from_dict(self):
        term = CustomImageTerm.from_dict(
            {**TERM_DATA, "version": "1.0.0", "distroName": DISTRO_UBUNTU2204_GEN2_ARM64}
        )

        assert term.gallery_subscription_id == GALLERY_SUBSCRIPTION_ID
        assert term.gallery_resource_group_name == "images-rg"
        assert term.gallery_name == "mygallery"
        assert term.name == "ubuntu-hardened"
        assert term.is_pinned is True
        assert term.distro_name == DISTRO_UBUNTU2204_GEN2_ARM64

    def test_from_dict_null_optionals(self):
        term = CustomImageTerm.from_dict({**TERM_DATA, "version": None, "distroName": None})

        assert term.version == ""
        assert term.distro_name == DEFAULT_CUSTOM_DISTRO


class TestNodeClassSpec:
    """Tests for NodeClassSpec parsing."""

    def test_defaults(self):
        spec = NodeClassSpec()

        assert spec.image_family == "Ubuntu2204"
        assert spec.image_source == DefaultImageSource()

    def test_unknown_image_family(self):
        with pytest.raises(ValidationError, match="Unsupported image family"):
            NodeClassSpec(image_family="Windows2022")

    def test_from_dict_default_source(self):
        spec = NodeClassSpec.from_dict({"imageFamily": "AzureLinux"})

        assert spec.image_family == "AzureLinux"
        assert isinstance(spec.image_source, DefaultImageSource)

    def test_from_dict_empty_term_is_default_source(self):
        spec = NodeClassSpec.from_dict({"customImageTerm": {}})

        assert isinstance(spec.image_source, DefaultImageSource)

    def test_from_dict_custom_source(self):
        spec = NodeClassSpec.from_dict({"imageFamily": "Custom", "customImageTerm": TERM_DATA})

        assert isinstance(spec.image_source, CustomImageSource)
        assert spec.image_source.term.name == "ubuntu-hardened"

    def test_from_dict_invalid_term(self):
        with pytest.raises(ValidationError):
            NodeClassSpec.from_dict({"customImageTerm": {"name": "ubuntu-hardened"}})


class TestInstanceType:
    """Tests for InstanceType.compatible()."""

    def test_compatible(self):
        assert make_instance_type().compatible(
            Requirements(Requirement.new(LABEL_ARCH, "In", "amd64"))
        )

    def test_incompatible(self):
        assert not make_instance_type(arch="arm64").compatible(
            Requirements(Requirement.new(LABEL_ARCH, "In", "amd64"))
        )

    def test_no_labels(self):
        assert InstanceType(name="Standard_Unlabeled").compatible(
            Requirements(Requirement.new(LABEL_ARCH, "In", "amd64"))
        )
