from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "imagegen-gallery"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"
    cors_origins: list[str] = ["*"]

    image_api_url: str = "https://bita-yonas--sd-demo-model-generate.modal.run"
    api_key: str = ""
    fetch_timeout: float = 120.0
    proxies: list[str] = []
    proxy_strategy: str = "round-robin"

    blob_backend: Literal["local", "vercel"] = "local"
    blob_api_url: str = "https://blob.vercel-storage.com"
    blob_api_version: str = "7"
    blob_read_write_token: str = ""
    uploads_path: str = "./uploads"
    public_base_url: str = "http://localhost:8000"


settings = Settings()


def get_settings() -> Settings:
    return settings
