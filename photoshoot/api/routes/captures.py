import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from photoshoot.api.dependencies import get_capture_service, get_collage_service, get_screen_manager
from photoshoot.errors import ImageDecodeFailure
from photoshoot.models.session import CaptureRequest, CaptureResponse
from photoshoot.services.capture import CaptureService, decode_base64_image
from photoshoot.services.collage import CollageService
from photoshoot.services.websocket import ScreenConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/captures", tags=["captures"])


async def compose_and_notify(
    collage_service: CollageService,
    screen_manager: ScreenConnectionManager,
    folder: str,
    screen_ids: List[str],
):
    try:
        result = await run_in_threadpool(collage_service.compose, folder)
    except Exception:
        logger.exception("Error generating collage for %s", folder)
        return

    await screen_manager.send_to_screens(screen_ids, {
        "type": "collage:ready",
        "session_folder": result.folder,
        "collages": {
            "landscape": f"/api/collages/{result.folder}?orientation=landscape",
            "portrait": f"/api/collages/{result.folder}?orientation=portrait",
        },
        "remote_urls": list(result.remote_urls) if result.remote_urls else None,
    })


@router.post("", response_model=CaptureResponse)
async def create_capture(
        request: CaptureRequest,
        background_tasks: BackgroundTasks,
        capture_service: CaptureService = Depends(get_capture_service),
        collage_service: CollageService = Depends(get_collage_service),
        screen_manager: ScreenConnectionManager = Depends(get_screen_manager)
):
    try:
        image_bytes = decode_base64_image(request.image)
        result = await run_in_threadpool(
            capture_service.ingest,
            request.group_id,
            request.device_id,
            image_bytes,
            request.timestamp,
        )
    except ImageDecodeFailure as e:
        raise HTTPException(status_code=400, detail=str(e))

    session_folder = result.session.folder_name
    image_url = result.remote_url or f"/api/photos/{result.relative_path}"

    await screen_manager.send_to_screens(request.screen_ids, {
        "type": "image:captured",
        "group_id": request.group_id,
        "device_id": request.device_id,
        "session_folder": session_folder,
        "image_url": image_url,
        "storage_type": "remote" if result.remote_url else "local",
    })

    # Compose the whole session so every camera's shots land in one collage pair
    background_tasks.add_task(
        compose_and_notify, collage_service, screen_manager, session_folder, request.screen_ids
    )

    return CaptureResponse(
        success=True,
        session_folder=session_folder,
        image_path=result.relative_path,
        image_url=image_url,
    )
