"""
layer_deploy.exceptions — Error taxonomy for layer reconciliation and deploy.

Every failure surfaced by the engine derives from LayerDeployError so callers
can catch a single type.  Adapters translate botocore errors into these
classes using the structured Error.Code field, never the message text.
"""


class LayerDeployError(RuntimeError):
    """Base class for all layer-deploy errors."""


class ConfigError(LayerDeployError):
    """Missing or invalid configuration (paths, callbacks, project version).

    Fatal; never retried.
    """


class ManifestReadError(LayerDeployError):
    """Raised when a dependency manifest is missing or unreadable."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read dependency manifest {path!r}: {reason}")


class SourceMissingError(LayerDeployError):
    """Raised when a code or dependency directory does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Source directory does not exist: {path}")


class StorageError(LayerDeployError):
    """Object store failure other than "object not found".

    Not retried by the artifact builder; retrying is the caller's decision.
    """

    def __init__(self, message: str, *, object_key: str | None = None) -> None:
        self.object_key = object_key
        super().__init__(message)


class ControlPlaneError(LayerDeployError):
    """Generic failure of a remote control-plane call."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        self.code = code
        super().__init__(message)


class LayerNotFoundError(ControlPlaneError):
    """The layer itself does not exist remotely yet.

    The version resolver treats this as "no published versions", not as a
    fatal error.
    """

    def __init__(self, layer_name: str) -> None:
        self.layer_name = layer_name
        super().__init__(f"Layer not found: {layer_name}", code="ResourceNotFoundException")


class InvalidLayerVersion(LayerDeployError):
    """A publish call succeeded but returned no usable name or reference."""

    def __init__(self, *, layer_name: str, missing: str) -> None:
        self.layer_name = layer_name
        self.missing = missing
        super().__init__(f"Published layer version for {layer_name!r} has no {missing}")
