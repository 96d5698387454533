"""Convenience exports for analysis modules."""

from .isochrone import (
    IsochroneService,
    OverpassFetcher,
    compute_isochrone,
    estimate_radius_m,
)

__all__ = [
    "IsochroneService",
    "OverpassFetcher",
    "compute_isochrone",
    "estimate_radius_m",
]
