from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from photoshoot.api.dependencies import get_collage_service
from photoshoot.errors import SessionFolderNotFound
from photoshoot.models.session import OrientationType
from photoshoot.services.collage import CollageService

router = APIRouter(prefix="/photos", tags=["photos"])


@router.get("/{file_path:path}")
async def download_photo(file_path: str, collage_service: CollageService = Depends(get_collage_service)):
    try:
        filepath = collage_service.store.resolve_path(file_path)
    except SessionFolderNotFound:
        raise HTTPException(status_code=404, detail="Photo not found")
    if not filepath.is_file():
        raise HTTPException(status_code=404, detail="Photo not found")

    return FileResponse(filepath, media_type="image/jpeg", filename=filepath.name)


@router.get("")
async def list_sessions(collage_service: CollageService = Depends(get_collage_service)):
    sessions = []
    root = collage_service.store.root

    if root.is_dir():
        for folder in root.iterdir():
            if not folder.is_dir():
                continue
            stat = folder.stat()
            sessions.append({
                "folder": folder.name,
                "photo_count": len(collage_service.find_source_images(folder)),
                "created": datetime.fromtimestamp(stat.st_ctime).isoformat(),
                "collages": {
                    o.value: collage_service.collage_exists(folder.name, o) for o in OrientationType
                },
            })

    return {"sessions": sorted(sessions, key=lambda x: x["created"], reverse=True)}
