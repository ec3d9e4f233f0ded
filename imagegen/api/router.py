from fastapi import APIRouter

from imagegen.api.endpoints import health, images, pages

router = APIRouter()
router.include_router(health.router, tags=["health"])
router.include_router(images.router, tags=["images"])
router.include_router(pages.router, tags=["pages"])
