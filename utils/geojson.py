"""
GeoJSON 导入 / 导出工具。
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple, Union

from core.exceptions import BizError

logger = logging.getLogger(__name__)

INVALID_GEOJSON = "Only valid GeoJSON is supported"


def result_to_feature(
    polygon: Dict[str, Any],
    params: Optional[Dict[str, Any]] = None,
    extra_properties: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    等时圈结果 -> GeoJSON Feature。已经是 Feature / FeatureCollection 的图层原样返回。
    """
    if polygon.get("type") in ("Feature", "FeatureCollection"):
        return polygon
    properties: Dict[str, Any] = dict(params or {})
    properties.update(extra_properties or {})
    return {"type": "Feature", "properties": properties, "geometry": polygon}


def export_filename(record: Dict[str, Any]) -> str:
    params = record.get("params") or {}
    if record.get("kind") == "isochrone" and params:
        return f"isochrone_{params.get('mode')}_{params.get('minutes')}m.geojson"
    return f"layer_{record.get('id')}.geojson"


def parse_uploaded_geojson(text: Union[str, bytes]) -> Tuple[str, Any]:
    """
    解析上传的 GeoJSON。

    Returns:
        ("poi", (lat, lng)) 当首个要素为 Point；
        ("layer", geojson) 其余几何作为静态图层。
    """
    try:
        geojson = json.loads(text)
    except (ValueError, TypeError) as exc:  # JSONDecodeError, UnicodeDecodeError
        raise BizError(INVALID_GEOJSON, payload={"error": str(exc)}) from exc

    if not isinstance(geojson, dict) or geojson.get("type") not in ("Feature", "FeatureCollection"):
        raise BizError(INVALID_GEOJSON)

    if geojson["type"] == "Feature":
        feature = geojson
    else:
        features = geojson.get("features") or []
        if not isinstance(features, list) or not features or not isinstance(features[0], dict):
            raise BizError(INVALID_GEOJSON, payload={"error": "empty FeatureCollection"})
        feature = features[0]

    geometry = feature.get("geometry") or {}
    if not isinstance(geometry, dict):
        raise BizError(INVALID_GEOJSON, payload={"error": "geometry must be an object"})
    if geometry.get("type") == "Point":
        try:
            lng, lat = (float(v) for v in geometry["coordinates"][:2])
        except (KeyError, TypeError, ValueError) as exc:
            raise BizError(INVALID_GEOJSON, payload={"error": "bad Point coordinates"}) from exc
        return "poi", (lat, lng)

    logger.info("导入静态图层: %s", geojson["type"])
    return "layer", geojson
