from typing import Annotated

from fastapi import Depends

from imagegen.config import Settings, get_settings
from imagegen.services.blob_store import BlobStore, create_blob_store
from imagegen.services.generation import GenerationService


def get_blob_store(config: Annotated[Settings, Depends(get_settings)]) -> BlobStore:
    return create_blob_store(config)


def get_generation_service(
    config: Annotated[Settings, Depends(get_settings)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
) -> GenerationService:
    return GenerationService(config, blob_store)
