"""Exception types for node image resolution.

Remote lookup failures (Azure SDK ``HttpResponseError`` and friends,
``requests.HTTPError``) are deliberately absent: they propagate to the caller
unchanged.

Public API:
    ImageResolutionError: Base exception
    NoCompatibleImageError: No catalog entry matched the instance type
    NoMatchingVersionError: No published version for an image definition
    CredentialError: Credential or client construction failed
    ValidationError: Malformed node class or custom image term
"""


class ImageResolutionError(Exception):
    """Base exception for image resolution failures."""

    pass


class NoCompatibleImageError(ImageResolutionError):
    """No default image requirements matched the instance type."""

    def __init__(self, instance_type: str):
        self.instance_type = instance_type
        super().__init__(f"no compatible images found for instance type {instance_type}")


class NoMatchingVersionError(ImageResolutionError):
    """No published image version exists for the image definition."""

    def __init__(self, image_definition: str):
        self.image_definition = image_definition
        super().__init__(f"failed to get the latest version of the image {image_definition}")


class CredentialError(ImageResolutionError):
    """Raised when an Azure credential or client cannot be created."""

    pass


class ValidationError(ImageResolutionError):
    """Invalid node class or custom image term."""

    pass


__all__ = [
    "CredentialError",
    "ImageResolutionError",
    "NoCompatibleImageError",
    "NoMatchingVersionError",
    "ValidationError",
]
