import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from core.config import settings

from .adapter import NetworkFetcher
from .graph_builder import build_graph, mode_speed_mps
from .hull import hull_to_geojson, reachability_hull
from .narrative import GeminiNarrator
from .schemas import IsochroneParams, IsochroneResult, TransportMode
from .search import bounded_search

logger = logging.getLogger(__name__)


def estimate_radius_m(
    mode: TransportMode,
    minutes: int,
    speeds: Optional[Mapping[str, float]] = None,
    padding_factor: Optional[float] = None,
) -> int:
    """
    Fetch radius for a request, rounded to the metre.

    Road paths are longer than the straight line, so the straight-line reach
    is padded (1.5x by default).
    """
    padding = settings.isochrone_padding_factor if padding_factor is None else padding_factor
    return round(mode_speed_mps(mode, speeds) * minutes * 60 * padding)


def _isochrone_from_elements(
    params: IsochroneParams,
    elements: List[Dict[str, Any]],
    speeds: Optional[Mapping[str, float]],
    tightness: float,
) -> Optional[IsochroneResult]:
    graph = build_graph(elements, params.mode, speeds)
    reachable = bounded_search(graph, params.lat, params.lng, params.max_seconds)
    points = [(graph.nodes[node_id].lon, graph.nodes[node_id].lat) for node_id in reachable]

    hull = reachability_hull(points, tightness)
    if hull is None:
        logger.info(
            f"No isochrone for {params.mode}/{params.minutes}min at ({params.lat}, {params.lng}): "
            f"{len(reachable)} reachable of {len(graph.nodes)} nodes"
        )
        return None

    return IsochroneResult(polygon=hull_to_geojson(hull), params=params.model_copy())


async def compute_isochrone(
    params: IsochroneParams,
    network_fetcher: NetworkFetcher,
    *,
    speeds: Optional[Mapping[str, float]] = None,
    padding_factor: Optional[float] = None,
    tightness: Optional[float] = None,
) -> Optional[IsochroneResult]:
    """
    Fetch -> build graph -> bounded search -> hull.

    Build, search and hull run in a worker thread after the fetch.
    Returns None when no area can be formed (sparse network or nothing in range).
    Fetch errors propagate to the caller.
    """
    tightness = settings.hull_max_edge_km if tightness is None else tightness
    radius_m = estimate_radius_m(params.mode, params.minutes, speeds, padding_factor)

    elements = await network_fetcher(params.lat, params.lng, radius_m, params.mode)

    return await asyncio.to_thread(_isochrone_from_elements, params, elements, speeds, tightness)


class IsochroneService:
    """
    Composition-root handle: owns the network fetcher, the optional narrator
    and the tuning values. Built once at startup and injected into routes.
    """

    def __init__(
        self,
        fetcher: NetworkFetcher,
        narrator: Optional[GeminiNarrator] = None,
        speeds: Optional[Mapping[str, float]] = None,
        padding_factor: Optional[float] = None,
        tightness: Optional[float] = None,
    ):
        self.fetcher = fetcher
        self.narrator = narrator
        self.speeds = dict(speeds if speeds is not None else settings.transport_speeds)
        self.padding_factor = settings.isochrone_padding_factor if padding_factor is None else padding_factor
        self.tightness = settings.hull_max_edge_km if tightness is None else tightness

    def radius_for(self, params: IsochroneParams) -> int:
        return estimate_radius_m(params.mode, params.minutes, self.speeds, self.padding_factor)

    async def compute(self, params: IsochroneParams) -> Optional[IsochroneResult]:
        return await compute_isochrone(
            params,
            self.fetcher,
            speeds=self.speeds,
            padding_factor=self.padding_factor,
            tightness=self.tightness,
        )

    async def describe(self, result: IsochroneResult) -> Optional[str]:
        if self.narrator is None:
            return None
        return await asyncio.to_thread(self.narrator.describe, result.params, result.polygon)
