import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.config import settings
from core.exceptions import DataIntegrityError

from .schemas import Edge, Graph, Node, TransportMode

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1.0 - a)))
    return EARTH_RADIUS_M * c


def mode_speed_mps(mode: TransportMode, speeds: Optional[Mapping[str, float]] = None) -> float:
    """
    Average speed of a transport mode in metres per second.

    Args:
        mode: 'walking', 'cycling' or 'driving'
        speeds: km/h table, defaults to ``settings.transport_speeds``
    """
    table = speeds if speeds is not None else settings.transport_speeds
    if mode not in table:
        raise ValueError(f"No average speed configured for mode '{mode}'")
    speed_kmh = float(table[mode])
    if not math.isfinite(speed_kmh) or speed_kmh <= 0:
        raise ValueError(f"Average speed for mode '{mode}' must be positive, got {speed_kmh}")
    return speed_kmh * 1000.0 / 3600.0


def _parse_node(element: Dict[str, Any]) -> Node:
    try:
        lat = float(element["lat"])
        lon = float(element["lon"])
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise ValueError(f"non-finite coordinate ({lat}, {lon})")
        return Node(id=str(element["id"]), lat=lat, lon=lon)
    except (KeyError, TypeError, ValueError) as exc:
        raise DataIntegrityError(f"Malformed node element: {exc}", element=element) from exc


def build_graph(
    elements: Iterable[Dict[str, Any]],
    mode: TransportMode,
    speeds: Optional[Mapping[str, float]] = None,
) -> Graph:
    """
    Build a bidirectional travel-time graph from Overpass elements.

    Ways are trusted to be pre-filtered for the mode; tags are never read here.
    Way segments referencing unknown nodes are skipped.
    """
    speed = mode_speed_mps(mode, speeds)
    elements = list(elements)

    nodes: Dict[str, Node] = {}
    for el in elements:
        if el.get("type") == "node":
            node = _parse_node(el)
            nodes[node.id] = node

    adjacency: Dict[str, List[Edge]] = {}
    edge_count = 0
    for el in elements:
        if el.get("type") != "way" or el.get("nodes") is None:
            continue
        refs = el["nodes"]
        if not isinstance(refs, list):
            raise DataIntegrityError("Way element 'nodes' must be a list", element=el)

        for u_ref, v_ref in zip(refs, refs[1:]):
            u_id, v_id = str(u_ref), str(v_ref)
            if u_id == v_id:
                continue
            u = nodes.get(u_id)
            v = nodes.get(v_id)
            if u is None or v is None:
                continue

            weight = haversine_m(u.lon, u.lat, v.lon, v.lat) / speed
            adjacency.setdefault(u_id, []).append(Edge(source=u_id, target=v_id, weight=weight))
            adjacency.setdefault(v_id, []).append(Edge(source=v_id, target=u_id, weight=weight))
            edge_count += 2

    logger.debug(f"Graph built: {len(nodes)} nodes, {edge_count} edges ({mode}, {speed:.2f} m/s)")
    return Graph(nodes=nodes, adjacency=adjacency)
