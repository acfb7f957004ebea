"""Workspace-location resolver: classify a raw reference, then rebuild an openable target."""

from wsrecall.resolver.location_classifier import classify, extract_wsl_distribution
from wsrecall.resolver.uri_reconstructor import canonical_wsl_path, reconstruct, resolve_reference
from wsrecall.resolver.distribution_validator import (
    DistributionValidator,
    decode_distribution_list,
    match_distribution,
)

__all__ = [
    "classify",
    "extract_wsl_distribution",
    "canonical_wsl_path",
    "reconstruct",
    "resolve_reference",
    "DistributionValidator",
    "decode_distribution_list",
    "match_distribution",
]
