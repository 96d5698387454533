from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

TransportMode = Literal["walking", "cycling", "driving"]


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    lat: float
    lon: float


class Edge(BaseModel):
    """Directed travel-time edge; weight is seconds."""
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    weight: float = Field(..., ge=0)


class Graph(BaseModel):
    """
    Travel-time graph built once per request.
    Adjacency is symmetric: every A->B edge has a B->A twin with the same weight.
    """
    model_config = ConfigDict(frozen=True)

    nodes: Dict[str, Node] = Field(default_factory=dict)
    adjacency: Dict[str, List[Edge]] = Field(default_factory=dict)


class IsochroneParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    mode: TransportMode = "walking"
    minutes: int = Field(..., gt=0)

    @property
    def max_seconds(self) -> int:
        return self.minutes * 60


class IsochroneResult(BaseModel):
    """
    Polygon is a GeoJSON geometry dict (Polygon or MultiPolygon).
    """
    model_config = ConfigDict(frozen=True)

    polygon: Dict[str, Any]
    params: IsochroneParams


class IsochroneRequest(BaseModel):
    """
    Request body for the isochrone endpoint. Coordinates are WGS84.
    """
    lat: float = Field(..., description="Latitude", ge=-90, le=90)
    lng: float = Field(..., description="Longitude", ge=-180, le=180)
    minutes: int = Field(15, description="Time budget (minutes)", gt=0, le=180)
    mode: TransportMode = Field("walking", description="Transportation Mode")

    def to_params(self) -> IsochroneParams:
        return IsochroneParams(lat=self.lat, lng=self.lng, mode=self.mode, minutes=self.minutes)


class IsochroneResponse(BaseModel):
    """
    Standard GeoJSON Response Wrapper
    """
    type: str = "Feature"
    properties: dict
    geometry: dict


class HistoryItem(BaseModel):
    id: int
    kind: Literal["isochrone", "layer"]
    description: Optional[str] = None
    created_at: str
    params: Optional[Dict[str, Any]] = None


class HistoryDetail(HistoryItem):
    polygon: Optional[Dict[str, Any]] = None
    narrative: Optional[str] = None


class ImportResponse(BaseModel):
    kind: Literal["poi", "layer"]
    lat: Optional[float] = None
    lng: Optional[float] = None
    history_id: Optional[int] = None
