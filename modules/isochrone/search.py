import heapq
import itertools
import logging
import math
from typing import Dict, List, Mapping, Optional, Tuple

from shapely import STRtree
from shapely.geometry import Point

from .schemas import Edge, Graph

logger = logging.getLogger(__name__)

ReachabilitySet = Dict[str, float]


class NodeLocator:
    """
    Nearest-node lookup backed by an STRtree.

    Coordinates are projected to a local equirectangular plane around
    ``ref_lat`` (lon scaled by cos(lat)), so the index is only meaningful for
    the small areas fetched per request.
    """

    def __init__(self, graph: Graph, ref_lat: float):
        self._scale = math.cos(math.radians(ref_lat))
        self._ids: List[str] = list(graph.nodes.keys())
        points = [self._project(n.lon, n.lat) for n in graph.nodes.values()]
        self._tree = STRtree(points) if points else None

    def _project(self, lon: float, lat: float) -> Point:
        return Point(lon * self._scale, lat)

    def nearest(self, lat: float, lng: float) -> Optional[str]:
        if self._tree is None:
            return None
        idx = self._tree.nearest(self._project(lng, lat))
        if idx is None:
            return None
        return self._ids[int(idx)]


def expand_bounded(
    adjacency: Mapping[str, List[Edge]],
    start_id: str,
    max_seconds: float,
) -> Tuple[ReachabilitySet, int]:
    """
    Dijkstra from ``start_id`` limited to ``max_seconds``.

    Returns the finalized distances (in finalization order) and the number of
    node expansions. Candidates above the budget are never pushed; equal
    priorities pop in discovery order.
    """
    if max_seconds < 0:
        return {}, 0

    best: Dict[str, float] = {start_id: 0.0}
    finalized: ReachabilitySet = {}
    counter = itertools.count()
    heap: List[Tuple[float, int, str]] = [(0.0, next(counter), start_id)]
    expansions = 0

    while heap:
        dist, _, node_id = heapq.heappop(heap)
        if node_id in finalized:
            continue
        finalized[node_id] = dist
        expansions += 1

        for edge in adjacency.get(node_id, ()):
            target = edge.target
            if target in finalized:
                continue
            candidate = dist + edge.weight
            if candidate > max_seconds:
                continue
            if candidate < best.get(target, math.inf):
                best[target] = candidate
                heapq.heappush(heap, (candidate, next(counter), target))

    return finalized, expansions


def bounded_search(
    graph: Graph,
    origin_lat: float,
    origin_lng: float,
    max_seconds: float,
) -> ReachabilitySet:
    """
    Nodes reachable from the node nearest to the origin within ``max_seconds``.

    An empty graph, or nothing in range, gives an empty mapping.
    """
    start_id = NodeLocator(graph, origin_lat).nearest(origin_lat, origin_lng)
    if start_id is None:
        logger.info("Bounded search skipped: graph has no nodes")
        return {}

    reachable, expansions = expand_bounded(graph.adjacency, start_id, max_seconds)
    logger.debug(
        "Bounded search from %s: %d reachable, %d expansions, budget %.0fs",
        start_id,
        len(reachable),
        expansions,
        max_seconds,
    )
    return reachable
