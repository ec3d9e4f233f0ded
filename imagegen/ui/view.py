"""View model for the generator page.

Mirrors the browser page served at ``/``: a prompt form, the latest generated
image and a gallery of saved images, all driven through the HTTP API.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx
import structlog

logger = structlog.get_logger()

GALLERY_ERROR_MESSAGE = "Could not load saved images."
GENERATE_ERROR_MESSAGE = "Failed to generate image"
NO_IMAGE_URL_MESSAGE = "No image URL received"


class ViewStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    DISPLAYING_RESULT = "displaying-result"
    ERROR = "error"


class GalleryStatus(str, Enum):
    LOADING = "loading-gallery"
    READY = "gallery-ready"


@dataclass
class ViewState:
    status: ViewStatus = ViewStatus.IDLE
    gallery_status: GalleryStatus = GalleryStatus.LOADING
    input_text: str = ""
    image_url: str | None = None
    error: str | None = None
    gallery_error: str | None = None
    gallery: list[str] = field(default_factory=list)


class ImageApiClient:
    def __init__(self, client: httpx.AsyncClient, path: str = "/api/generate-image") -> None:
        self.client = client
        self.path = path

    async def generate(self, text: str) -> dict[str, Any]:
        response = await self.client.post(self.path, json={"text": text})
        return response.json()

    async def list_images(self) -> dict[str, Any]:
        response = await self.client.get(self.path)
        return response.json()


class ImageGeneratorView:
    def __init__(self, api: ImageApiClient) -> None:
        self.api = api
        self.state = ViewState()

    async def mount(self) -> None:
        self.state.gallery_status = GalleryStatus.LOADING
        try:
            data = await self.api.list_images()
            if not data.get("success"):
                raise RuntimeError(data.get("error") or "Failed to load saved images.")
            self.state.gallery = list(data.get("imageUrls") or [])
        except Exception as e:
            logger.error("gallery_load_failed", error=str(e))
            self.state.gallery_error = GALLERY_ERROR_MESSAGE
        finally:
            self.state.gallery_status = GalleryStatus.READY

    async def submit(self, text: str | None = None) -> None:
        if self.state.status is ViewStatus.SUBMITTING:
            logger.debug("submit_ignored")
            return
        if text is not None:
            self.state.input_text = text

        self.state.status = ViewStatus.SUBMITTING
        self.state.image_url = None
        self.state.error = None

        try:
            result = await self.api.generate(self.state.input_text)
        except Exception as e:
            logger.error("generate_request_failed", error=str(e))
            self._fail(str(e) or GENERATE_ERROR_MESSAGE)
            return

        if not isinstance(result, dict):
            logger.error("generate_response_malformed", response_type=type(result).__name__)
            self._fail(GENERATE_ERROR_MESSAGE)
            return

        if not result.get("success"):
            self._fail(str(result.get("error") or GENERATE_ERROR_MESSAGE))
            return

        image_url = result.get("imageUrl")
        if not image_url or not isinstance(image_url, str):
            self._fail(NO_IMAGE_URL_MESSAGE)
            return

        self.state.image_url = image_url
        self.state.gallery.insert(0, image_url)
        self.state.input_text = ""
        self.state.status = ViewStatus.DISPLAYING_RESULT

    def _fail(self, message: str) -> None:
        self.state.error = message
        self.state.status = ViewStatus.ERROR
