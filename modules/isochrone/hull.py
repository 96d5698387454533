import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from shapely.errors import ShapelyError
from shapely.geometry import MultiPoint, MultiPolygon, Polygon, mapping
from shapely.ops import triangulate, unary_union

from .graph_builder import haversine_m

logger = logging.getLogger(__name__)

HullGeometry = Union[Polygon, MultiPolygon]
LonLat = Tuple[float, float]


def _distinct(points: Sequence[LonLat]) -> List[LonLat]:
    return list(dict.fromkeys((float(x), float(y)) for x, y in points))


def _longest_edge_km(triangle: Polygon) -> float:
    coords = list(triangle.exterior.coords)[:3]
    longest = 0.0
    for (x1, y1), (x2, y2) in zip(coords, coords[1:] + coords[:1]):
        longest = max(longest, haversine_m(x1, y1, x2, y2) / 1000.0)
    return longest


def _as_area(geom) -> Optional[HullGeometry]:
    if isinstance(geom, (Polygon, MultiPolygon)) and not geom.is_empty and geom.area > 0:
        return geom
    return None


def concave_hull(points: Sequence[LonLat], max_edge_km: float) -> Optional[HullGeometry]:
    """
    Alpha-shape style hull: Delaunay triangles whose longest edge is at most
    ``max_edge_km`` are kept and unioned.

    Returns None when every triangle is too long (or the points are collinear).
    """
    triangles = triangulate(MultiPoint(list(points)))
    kept = [t for t in triangles if _longest_edge_km(t) <= max_edge_km]
    if not kept:
        return None
    return _as_area(unary_union(kept))


def convex_hull(points: Sequence[LonLat]) -> Optional[HullGeometry]:
    return _as_area(MultiPoint(list(points)).convex_hull)


def reachability_hull(points: Sequence[LonLat], tightness: float) -> Optional[HullGeometry]:
    """
    Boundary around reachable (lon, lat) points.

    Args:
        points: (lon, lat) pairs
        tightness: max concave-hull edge length in km; smaller hugs the points closer

    Returns:
        Polygon / MultiPolygon, or None if fewer than 3 distinct or all collinear points.
    """
    distinct = _distinct(points)
    if len(distinct) < 3:
        return None

    try:
        hull = concave_hull(distinct, tightness)
    except (ShapelyError, ValueError, ArithmeticError) as exc:
        logger.warning(f"Concave hull failed ({exc}), falling back to convex hull")
        hull = None

    if hull is None:
        hull = convex_hull(distinct)
    return hull


def hull_to_geojson(hull: HullGeometry) -> Dict[str, Any]:
    geometry = mapping(hull)
    # nested tuples -> lists
    return {"type": geometry["type"], "coordinates": _to_lists(geometry["coordinates"])}


def _to_lists(value):
    if isinstance(value, (list, tuple)):
        return [_to_lists(v) for v in value]
    return value
