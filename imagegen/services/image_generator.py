from io import BytesIO

import structlog
from PIL import Image, UnidentifiedImageError

from imagegen.config import Settings, settings
from imagegen.core.exceptions import UpstreamError
from imagegen.services.http_client import get_http_client

logger = structlog.get_logger()

JPEG_MAGIC = b"\xff\xd8"


def ensure_jpeg(image_bytes: bytes) -> bytes:
    if image_bytes[:2] == JPEG_MAGIC:
        return image_bytes
    try:
        img = Image.open(BytesIO(image_bytes))
        source_format = img.format
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        buffer = BytesIO()
        img.save(buffer, format="JPEG", quality=90)
    except (UnidentifiedImageError, OSError) as e:
        raise UpstreamError("Image service returned an invalid image") from e
    logger.info("upstream_image_converted", source_format=source_format)
    return buffer.getvalue()


async def generate_image(prompt: str, config: Settings = settings) -> bytes:
    client = get_http_client()
    headers = {"X-API-KEY": config.api_key, "Accept": "image/jpeg"}
    logger.info("image_generation_requested", url=config.image_api_url, prompt=prompt)
    try:
        response = await client.get(config.image_api_url, params={"prompt": prompt}, headers=headers)
    except Exception as e:
        logger.error("image_service_unreachable", error=str(e))
        raise UpstreamError(f"Image service request failed: {e}") from e

    if not response.is_success:
        logger.error("image_service_error", status=response.status_code, body=response.text[:500])
        raise UpstreamError(f"HTTP error! Status: {response.status_code}, Message: {response.text}")

    return ensure_jpeg(response.content)
