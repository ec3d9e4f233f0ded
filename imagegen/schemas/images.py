from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateImageRequest(BaseModel):
    text: StrictStr = Field(min_length=1)


class GenerateImageResponse(CamelModel):
    success: Literal[True] = True
    image_url: str


class ImageListResponse(CamelModel):
    success: Literal[True] = True
    image_urls: list[str]


class ErrorResponse(CamelModel):
    success: Literal[False] = False
    error: str


class PutBlobResult(CamelModel):
    url: str
    pathname: str
    content_type: str | None = None


class BlobObject(CamelModel):
    url: str
    pathname: str = ""
    content_type: str | None = None
    size: int | None = None
    uploaded_at: datetime | None = None


class BlobListResult(CamelModel):
    blobs: list[BlobObject] = []
    cursor: str | None = None
    has_more: bool = False
