"""nodeimage command line interface.

Operator commands for inspecting image families and resolving node images
outside the provisioning loop:
- resolve: Distro and image ID for an instance type
- latest: Refresh the latest image ID of every catalog entry
- families: Show image family catalogs
- kube-version: Show the cluster version
"""

import logging
import sys

import click
from rich.console import Console
from rich.table import Table

from nodeimage import __version__
from nodeimage.click_group import NodeImageGroup
from nodeimage.config import ConfigError, ConfigManager
from nodeimage.exceptions import ImageResolutionError
from nodeimage.image_families import get_image_family
from nodeimage.image_provider import ImageProvider
from nodeimage.kube_version import KubernetesVersionDiscovery
from nodeimage.models import IMAGE_FAMILIES, InstanceType, NodeClassSpec
from nodeimage.requirements import (
    LABEL_ARCH,
    LABEL_INSTANCE_TYPE,
    LABEL_SKU_HYPERV_GENERATION,
    Requirements,
)

logger = logging.getLogger(__name__)
console = Console()


@click.group(cls=NodeImageGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
def main(verbose: bool) -> None:
    """Resolve Azure VM images for Kubernetes worker nodes.

    \b
    EXAMPLES:
        $ nodeimage families
        $ nodeimage resolve --instance-type Standard_D4s_v5
        $ nodeimage latest --image-family AzureLinux
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")


def _load_provider(config_path: str | None) -> ImageProvider:
    config = ConfigManager.load_config(config_path)
    return ImageProvider.from_config(
        config, kubernetes_version=KubernetesVersionDiscovery().server_version
    )


@main.command(name="resolve")
@click.option("--config", help="Config file path", type=click.Path())
@click.option("--instance-type", required=True, help="Instance type name, e.g. Standard_D4s_v5")
@click.option("--arch", default="amd64", show_default=True, type=click.Choice(["amd64", "arm64"]))
@click.option(
    "--hyperv-generation", default="2", show_default=True, type=click.Choice(["1", "2"])
)
@click.option(
    "--image-family",
    default=IMAGE_FAMILIES[0],
    show_default=True,
    type=click.Choice(IMAGE_FAMILIES),
)
@click.option("--gallery-subscription", help="Custom image gallery subscription ID")
@click.option("--gallery-resource-group", help="Custom image gallery resource group")
@click.option("--gallery-name", help="Custom image gallery name")
@click.option("--image-name", help="Custom image definition name")
@click.option("--image-version", default="", help="Custom image version (default: latest)")
@click.option("--distro", help="Custom image distro name")
def resolve(
    config: str | None,
    instance_type: str,
    arch: str,
    hyperv_generation: str,
    image_family: str,
    gallery_subscription: str | None,
    gallery_resource_group: str | None,
    gallery_name: str | None,
    image_name: str | None,
    image_version: str,
    distro: str | None,
) -> None:
    """Resolve the distro and image ID for an instance type.

    Passing any --gallery-* or --image-name option resolves a custom image
    instead of the image family's default catalog.

    \b
    EXAMPLES:
        $ nodeimage resolve --instance-type Standard_D4ps_v5 --arch arm64
        $ nodeimage resolve --instance-type Standard_D4s_v5 \\
            --gallery-subscription xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx \\
            --gallery-resource-group images-rg --gallery-name mygallery \\
            --image-name ubuntu-hardened
    """
    custom = any((gallery_subscription, gallery_resource_group, gallery_name, image_name))
    if not custom and (image_version or distro):
        raise click.UsageError(
            "--image-version and --distro require a custom image (--gallery-* or --image-name)"
        )

    spec: dict = {"imageFamily": image_family}
    if custom:
        spec["customImageTerm"] = {
            "gallerySubscriptionID": gallery_subscription or "",
            "galleryResourceGroupName": gallery_resource_group or "",
            "galleryName": gallery_name or "",
            "name": image_name or "",
            "version": image_version,
            "distroName": distro,
        }

    try:
        node_class = NodeClassSpec.from_dict(spec)
        candidate = InstanceType(
            name=instance_type,
            requirements=Requirements.from_labels(
                {
                    LABEL_ARCH: arch,
                    LABEL_SKU_HYPERV_GENERATION: hyperv_generation,
                    LABEL_INSTANCE_TYPE: instance_type,
                }
            ),
        )
        with _load_provider(config) as provider:
            resolved_distro, image_id = provider.get(
                node_class, candidate, get_image_family(node_class.image_family)
            )
    except (ConfigError, ImageResolutionError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        logger.error(f"Failed to resolve image: {e}", exc_info=True)
        sys.exit(1)

    console.print(f"[green]Distro:[/green] {resolved_distro}")
    console.print(f"[green]Image ID:[/green] {image_id}")


@main.command(name="latest")
@click.option("--config", help="Config file path", type=click.Path())
@click.option(
    "--image-family",
    default=IMAGE_FAMILIES[0],
    show_default=True,
    type=click.Choice(IMAGE_FAMILIES),
)
@click.option("--image-definition", help="Only resolve this image definition")
def latest(config: str | None, image_family: str, image_definition: str | None) -> None:
    """Resolve the latest image ID of each default image.

    \b
    EXAMPLES:
        $ nodeimage latest
        $ nodeimage latest --image-family AzureLinux --image-definition V2gen2
    """
    family = get_image_family(image_family)
    descriptors = [
        d
        for d in family.default_images()
        if image_definition is None or d.image_definition == image_definition
    ]
    if not descriptors:
        console.print(
            f"[yellow]No image definition '{image_definition}' in family {family.name}.[/yellow]"
        )
        sys.exit(1)

    table = Table(title=f"{family.name} Latest Images")
    table.add_column("Image Definition", style="green")
    table.add_column("Distro", style="cyan")
    table.add_column("Image ID", style="blue")

    try:
        with _load_provider(config) as provider:
            for descriptor in descriptors:
                table.add_row(
                    descriptor.image_definition,
                    descriptor.distro,
                    provider.get_latest_image_id(descriptor),
                )
    except (ConfigError, ImageResolutionError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        logger.error(f"Failed to resolve latest images: {e}", exc_info=True)
        sys.exit(1)

    console.print(table)


@main.command(name="families")
def families() -> None:
    """Show every image family's default catalog, in preference order."""
    for name in IMAGE_FAMILIES:
        family = get_image_family(name)
        table = Table(title=f"{family.name} Images")
        table.add_column("#", style="cyan", width=3)
        table.add_column("Image Definition", style="green")
        table.add_column("Distro", style="blue")
        table.add_column("Requirements", style="yellow")

        for index, descriptor in enumerate(family.default_images(), start=1):
            table.add_row(
                str(index),
                descriptor.image_definition,
                descriptor.distro,
                "\n".join(str(r) for r in descriptor.requirements),
            )
        console.print(table)


@main.command(name="kube-version")
@click.option("--config", help="Config file path", type=click.Path())
def kube_version(config: str | None) -> None:
    """Show the Kubernetes API server version, without the leading "v"."""
    try:
        with _load_provider(config) as provider:
            version = provider.kube_server_version()
    except (ConfigError, ImageResolutionError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error:[/red] Failed to read cluster version: {e}")
        logger.error(f"Failed to read cluster version: {e}", exc_info=True)
        sys.exit(1)
    console.print(version)


if __name__ == "__main__":
    main()
