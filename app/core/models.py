from typing import Optional
from pydantic import BaseModel

class DirectoryStats(BaseModel):
    created: int = 0
    existing: int = 0
    failed: int = 0

class ImageMetadata(BaseModel):
    width: Optional[int] = None
    height: Optional[int] = None
    format: str = "webp"
    original_format: Optional[str] = None
    size: int

class ProcessedImage(BaseModel):
    processed_path: str
    metadata: ImageMetadata

class PhotoResponse(BaseModel):
    photo_id: str
    url: str
    metadata: ImageMetadata

class ListResponse(BaseModel):
    count: int
    items: list
