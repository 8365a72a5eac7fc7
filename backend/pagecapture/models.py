from pydantic import BaseModel, Field
from typing import List, Optional


class ScreenshotRequest(BaseModel):
    url: str
    zoom: float = 1.0


class OgRequest(BaseModel):
    url: str


class OgImageMetadata(BaseModel):
    url: str


class FetchedImage(BaseModel):
    content: bytes
    content_type: str = "image/jpeg"


class ErrorResponse(BaseModel):
    error: str
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class EndpointInfo(BaseModel):
    method: str
    path: str
    body: Optional[str] = None
    query: Optional[str] = None
    returns: str


class ServiceInfo(BaseModel):
    message: str
    endpoints: List[EndpointInfo]
