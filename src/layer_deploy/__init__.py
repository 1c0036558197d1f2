"""
layer_deploy — Deploy functions that share a fingerprinted dependency layer.

The reconciliation engine decides, from a fingerprint of the dependency
manifests, whether the shared layer bundle must be rebuilt, uploads it at
most once, reuses an existing layer version for an already-seen fingerprint,
and splices the resolved layer into every target that needs it.
"""

from layer_deploy.artifact import ensure_artifact
from layer_deploy.exceptions import (
    ConfigError,
    ControlPlaneError,
    InvalidLayerVersion,
    LayerDeployError,
    LayerNotFoundError,
    ManifestReadError,
    SourceMissingError,
    StorageError,
)
from layer_deploy.fingerprint import compute_fingerprint
from layer_deploy.models import LayerPlan, LayerVersionRef, Target
from layer_deploy.reconciler import reconcile, setup_layers, splice_layer_reference
from layer_deploy.resolver import resolve_layer_version

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "ControlPlaneError",
    "InvalidLayerVersion",
    "LayerDeployError",
    "LayerNotFoundError",
    "LayerPlan",
    "LayerVersionRef",
    "ManifestReadError",
    "SourceMissingError",
    "StorageError",
    "Target",
    "compute_fingerprint",
    "ensure_artifact",
    "reconcile",
    "resolve_layer_version",
    "setup_layers",
    "splice_layer_reference",
]
