from typing import Any

import pydantic
import structlog

from imagegen.config import Settings
from imagegen.core.exceptions import INVALID_PROMPT_MESSAGE, AppError, StorageError, ValidationError
from imagegen.schemas.images import GenerateImageRequest
from imagegen.services import image_generator
from imagegen.services.blob_store import BlobStore, generate_blob_name

logger = structlog.get_logger()

IMAGE_CONTENT_TYPE = "image/jpeg"


def parse_prompt(payload: Any) -> str:
    try:
        request = GenerateImageRequest.model_validate(payload)
    except pydantic.ValidationError as e:
        logger.warning("invalid_prompt", errors=e.error_count())
        raise ValidationError(INVALID_PROMPT_MESSAGE) from e
    return request.text


class GenerationService:
    """Generates an image for a prompt and keeps it in the blob store.

    Each call is independent: ``generate`` awaits the image service and then the
    blob store, ``list_images`` makes a single list call.
    """

    def __init__(self, config: Settings, blob_store: BlobStore) -> None:
        self.config = config
        self.blob_store = blob_store

    async def generate(self, payload: Any) -> str:
        prompt = parse_prompt(payload)
        logger.info("prompt_received", prompt=prompt)

        image_bytes = await image_generator.generate_image(prompt, self.config)

        filename = generate_blob_name("jpg")
        try:
            blob = await self.blob_store.put(
                filename, image_bytes, access="public", content_type=IMAGE_CONTENT_TYPE
            )
        except AppError:
            raise
        except Exception as e:
            logger.error("blob_put_failed", name=filename, error=str(e))
            raise StorageError(f"Failed to store image: {e}") from e

        logger.info("image_uploaded", url=blob.url)
        return blob.url

    async def list_images(self) -> list[str]:
        try:
            result = await self.blob_store.list()
        except AppError:
            raise
        except Exception as e:
            logger.error("blob_list_failed", error=str(e))
            raise StorageError(f"Failed to fetch saved images: {e}") from e

        if not result.blobs:
            logger.info("no_saved_images")
            return []

        image_urls = [blob.url for blob in result.blobs]
        logger.info("saved_images_fetched", count=len(image_urls))
        return image_urls
