from .adapter import OverpassFetcher, build_overpass_query
from .core import IsochroneService, compute_isochrone, estimate_radius_m
from .graph_builder import build_graph, haversine_m
from .hull import reachability_hull
from .narrative import GeminiNarrator
from .search import bounded_search

__all__ = [
    "GeminiNarrator",
    "IsochroneService",
    "OverpassFetcher",
    "bounded_search",
    "build_graph",
    "build_overpass_query",
    "compute_isochrone",
    "estimate_radius_m",
    "haversine_m",
    "reachability_hull",
]
