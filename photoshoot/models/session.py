from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

IDENTIFIER_PATTERN = r"^[A-Za-z0-9_-]+$"


class OrientationType(str, Enum):
    landscape = "landscape"
    portrait = "portrait"


class LayoutType(str, Enum):
    grid = "grid"
    scatter = "scatter"


class CaptureRequest(BaseModel):
    group_id: str = Field(..., min_length=1, max_length=64, pattern=IDENTIFIER_PATTERN)
    device_id: str = Field(..., min_length=1, max_length=64, pattern=IDENTIFIER_PATTERN)
    image: str = Field(..., min_length=1, description="Base64 image, optionally as a data URL")
    timestamp: Optional[int] = Field(None, ge=0, description="Client capture time in epoch milliseconds")
    screen_ids: List[str] = []


class CaptureResponse(BaseModel):
    success: bool
    session_folder: str
    image_path: str
    image_url: Optional[str] = None


class GenerateCollageRequest(BaseModel):
    width: Optional[int] = Field(None, ge=64, le=8192)
    height: Optional[int] = Field(None, ge=64, le=8192)


class CollageResponse(BaseModel):
    success: bool
    folder: str
    local_paths: List[str]
    remote_urls: Optional[List[str]] = None


class CollageStatusResponse(BaseModel):
    folder: str
    landscape: bool
    portrait: bool


class BackfillResponse(BaseModel):
    success: bool
    scanned: int
    generated: List[str] = []
    failed: List[str] = []
