from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse

from imagegen.api.deps import get_blob_store, get_generation_service
from imagegen.core.exceptions import INVALID_PROMPT_MESSAGE, AppError, NotFoundError, ValidationError
from imagegen.schemas.images import ErrorResponse, GenerateImageResponse, ImageListResponse
from imagegen.services.blob_store import BlobStore, LocalBlobStore
from imagegen.services.generation import GenerationService

logger = structlog.get_logger()

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post("/api/generate-image", response_model=GenerateImageResponse, responses=_ERROR_RESPONSES)
async def generate_image(
    request: Request,
    service: Annotated[GenerationService, Depends(get_generation_service)],
) -> GenerateImageResponse:
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationError(INVALID_PROMPT_MESSAGE) from e

    try:
        image_url = await service.generate(payload)
    except AppError as e:
        logger.error("image_generation_failed", status=e.status_code, error=e.detail)
        raise
    except Exception as e:
        logger.exception("image_generation_failed")
        raise AppError(str(e) or "Failed to process request") from e

    return GenerateImageResponse(image_url=image_url)


@router.get("/api/generate-image", response_model=ImageListResponse, responses=_ERROR_RESPONSES)
async def list_images(
    service: Annotated[GenerationService, Depends(get_generation_service)],
) -> ImageListResponse:
    try:
        image_urls = await service.list_images()
    except AppError as e:
        logger.error("image_list_failed", status=e.status_code, error=e.detail)
        raise
    except Exception as e:
        logger.exception("image_list_failed")
        raise AppError(str(e) or "Failed to fetch saved images") from e

    return ImageListResponse(image_urls=image_urls)


@router.get("/images/{name}")
async def get_image(name: str, blob_store: Annotated[BlobStore, Depends(get_blob_store)]) -> FileResponse:
    if not isinstance(blob_store, LocalBlobStore):
        raise NotFoundError("Image not found")

    result = blob_store.get_path(name)
    if not result:
        raise NotFoundError("Image not found")

    image_path, media_type = result
    return FileResponse(
        path=image_path,
        media_type=media_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )
