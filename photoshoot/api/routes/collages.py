from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse

from photoshoot.api.dependencies import get_collage_service, get_discovery
from photoshoot.errors import NoSourceImages, SessionFolderNotFound
from photoshoot.models.collage import Resolution
from photoshoot.models.session import (
    BackfillResponse,
    CollageResponse,
    CollageStatusResponse,
    GenerateCollageRequest,
    OrientationType,
)
from photoshoot.services.collage import CollageService, collage_filename
from photoshoot.services.discovery import CollageDiscovery

router = APIRouter(prefix="/collages", tags=["collages"])


async def _compose(collage_service: CollageService, folder_path: str, resolution: Optional[Resolution] = None):
    try:
        return await run_in_threadpool(collage_service.compose, folder_path, resolution)
    except SessionFolderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except NoSourceImages as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/generate-missing", response_model=BackfillResponse)
async def generate_missing_collages(discovery: CollageDiscovery = Depends(get_discovery)):
    report = await run_in_threadpool(discovery.run_backfill_sweep)
    return BackfillResponse(
        success=not report.failed,
        scanned=report.scanned,
        generated=report.generated,
        failed=report.failed,
    )


@router.get("/{folder_path:path}/status", response_model=CollageStatusResponse)
async def collage_status(folder_path: str, collage_service: CollageService = Depends(get_collage_service)):
    try:
        return CollageStatusResponse(
            folder=folder_path,
            landscape=collage_service.collage_exists(folder_path, OrientationType.landscape),
            portrait=collage_service.collage_exists(folder_path, OrientationType.portrait),
        )
    except SessionFolderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{folder_path:path}/generate", response_model=CollageResponse)
async def generate_collage(
        folder_path: str,
        request: Optional[GenerateCollageRequest] = None,
        collage_service: CollageService = Depends(get_collage_service)
):
    resolution = None
    if request is not None and (request.width is not None or request.height is not None):
        if request.width is None or request.height is None:
            raise HTTPException(status_code=422, detail="width and height must be given together")
        resolution = Resolution(request.width, request.height)

    result = await _compose(collage_service, folder_path, resolution)
    return CollageResponse(
        success=True,
        folder=result.folder,
        local_paths=[str(p) for p in result.local_paths],
        remote_urls=list(result.remote_urls) if result.remote_urls else None,
    )


@router.get("/{folder_path:path}")
async def get_collage(
        folder_path: str,
        orientation: OrientationType = OrientationType.landscape,
        collage_service: CollageService = Depends(get_collage_service)
):
    try:
        exists = collage_service.collage_exists(folder_path, orientation)
    except SessionFolderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    if not exists:
        try:
            await run_in_threadpool(collage_service.compose, folder_path)
        except (SessionFolderNotFound, NoSourceImages):
            raise HTTPException(status_code=404, detail="Collage not found and could not be generated")

    filepath = collage_service.collage_path(folder_path, orientation)
    return FileResponse(filepath, media_type="image/jpeg", filename=collage_filename(orientation))
