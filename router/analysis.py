from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from typing import List
import logging
import time
import asyncio

from modules.isochrone import IsochroneService
from modules.isochrone.schemas import (
    HistoryDetail,
    HistoryItem,
    ImportResponse,
    IsochroneRequest,
    IsochroneResponse,
    IsochroneResult,
)
from store.history_repo import history_repo
from utils import export_filename, parse_uploaded_geojson, result_to_feature

from .utils.deps import get_isochrone_service

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/v1", tags=["Spatial Analysis"])

NO_ISOCHRONE_DETAIL = (
    "Could not generate isochrone for this area. The road network may be sparse; "
    "try a larger time budget or a denser area."
)


async def _attach_narrative(service: IsochroneService, record_id: int, result: IsochroneResult):
    text = await service.describe(result)
    if text:
        await asyncio.to_thread(history_repo.attach_narrative, record_id, text)


@router.post(
    "/analysis/isochrone",
    response_model=IsochroneResponse,
    summary="Calculate Isochrone Polygon",
    description="Builds a travel-time graph from OpenStreetMap ways and returns the reachable area (WGS84).",
)
async def calculate_isochrone_endpoint(
    payload: IsochroneRequest,
    background_tasks: BackgroundTasks,
    service: IsochroneService = Depends(get_isochrone_service),
):
    start_time = time.time()
    params = payload.to_params()

    result = await service.compute(params)
    if result is None:
        raise HTTPException(status_code=404, detail=NO_ISOCHRONE_DETAIL)

    params_dict = result.params.model_dump()
    record_id = await asyncio.to_thread(
        history_repo.create_record,
        result.polygon,
        params_dict,
        "isochrone",
        f"{params.mode} - {params.minutes}m",
    )

    if service.narrator is not None:
        background_tasks.add_task(_attach_narrative, service, record_id, result)

    return result_to_feature(
        result.polygon,
        params_dict,
        {
            "history_id": record_id,
            "radius_m": service.radius_for(params),
            "algorithm": "dijkstra-concave",
            "calc_time_ms": int((time.time() - start_time) * 1000),
        },
    )


@router.get("/analysis/history", response_model=List[HistoryItem], summary="Get Analysis History")
async def get_history_list(limit: int = 20):
    return await asyncio.to_thread(history_repo.get_list, limit)


@router.get("/analysis/history/{id}", response_model=HistoryDetail, summary="Get Analysis Detail")
async def get_history_detail(id: int):
    res = await asyncio.to_thread(history_repo.get_detail, id)
    if not res:
        raise HTTPException(status_code=404, detail="Record not found")
    return res


@router.get("/analysis/history/{id}/export", summary="Export Record as GeoJSON")
async def export_history_record(id: int):
    res = await asyncio.to_thread(history_repo.get_detail, id)
    if not res:
        raise HTTPException(status_code=404, detail="Record not found")
    filename = export_filename(res)
    return JSONResponse(
        content=result_to_feature(res["polygon"], res["params"]),
        media_type="application/geo+json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/analysis/history/{id}", summary="Delete Analysis Record")
async def delete_history_record(id: int):
    success = await asyncio.to_thread(history_repo.delete_record, id)
    if not success:
        raise HTTPException(status_code=404, detail="Record not found")
    return {"status": "success", "id": id}


@router.delete("/analysis/history", summary="Clear Analysis History")
async def clear_history():
    removed = await asyncio.to_thread(history_repo.clear_all)
    return {"status": "success", "removed": removed}


@router.post("/analysis/import", response_model=ImportResponse, summary="Import GeoJSON")
async def import_geojson(request: Request):
    """
    Point -> new POI; other geometries are stored as a static history layer.
    """
    kind, value = parse_uploaded_geojson(await request.body())
    if kind == "poi":
        lat, lng = value
        return {"kind": "poi", "lat": lat, "lng": lng}

    record_id = await asyncio.to_thread(
        history_repo.create_record,
        value,
        None,
        "layer",
        "Imported layer",
    )
    return {"kind": "layer", "history_id": record_id}
