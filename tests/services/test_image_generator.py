from io import BytesIO
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from PIL import Image

from imagegen.config import Settings
from imagegen.core.exceptions import UpstreamError
from imagegen.services import http_client, image_generator


def _make_test_image(fmt: str = "JPEG", mode: str = "RGB") -> bytes:
    img = Image.new(mode, (32, 32))
    buffer = BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def _mock_client(response: httpx.Response | None = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    client.get = AsyncMock(return_value=response, side_effect=error)
    return client


class TestEnsureJpeg:
    def test_jpeg_passthrough(self) -> None:
        data = _make_test_image("JPEG")
        assert image_generator.ensure_jpeg(data) is data

    def test_png_converted(self) -> None:
        result = image_generator.ensure_jpeg(_make_test_image("PNG"))
        assert result[:2] == b"\xff\xd8"
        assert Image.open(BytesIO(result)).format == "JPEG"

    def test_rgba_flattened(self) -> None:
        result = image_generator.ensure_jpeg(_make_test_image("PNG", mode="RGBA"))
        assert Image.open(BytesIO(result)).mode == "RGB"

    def test_webp_converted(self) -> None:
        result = image_generator.ensure_jpeg(_make_test_image("WEBP"))
        assert result[:2] == b"\xff\xd8"

    def test_garbage_rejected(self) -> None:
        with pytest.raises(UpstreamError, match="invalid image"):
            image_generator.ensure_jpeg(b"<html>not an image</html>")


class TestGenerateImage:
    async def test_sends_prompt_and_headers(self, test_settings: Settings) -> None:
        jpeg = _make_test_image()
        client = _mock_client(httpx.Response(200, content=jpeg))
        with patch.object(image_generator, "get_http_client", return_value=client):
            result = await image_generator.generate_image("a red fox", test_settings)
        assert result == jpeg
        client.get.assert_awaited_once_with(
            "https://images.example/generate",
            params={"prompt": "a red fox"},
            headers={"X-API-KEY": "test-key", "Accept": "image/jpeg"},
        )

    async def test_empty_api_key_sent_as_empty_header(self, test_settings: Settings) -> None:
        config = test_settings.model_copy(update={"api_key": ""})
        client = _mock_client(httpx.Response(200, content=_make_test_image()))
        with patch.object(image_generator, "get_http_client", return_value=client):
            await image_generator.generate_image("x", config)
        assert client.get.await_args.kwargs["headers"]["X-API-KEY"] == ""

    async def test_non_success_status(self, test_settings: Settings) -> None:
        client = _mock_client(httpx.Response(503, text="overloaded"))
        with (
            patch.object(image_generator, "get_http_client", return_value=client),
            pytest.raises(UpstreamError) as exc_info,
        ):
            await image_generator.generate_image("x", test_settings)
        assert exc_info.value.detail == "HTTP error! Status: 503, Message: overloaded"

    @pytest.mark.parametrize("status", [400, 401, 404, 500, 502])
    async def test_error_embeds_status_code(self, test_settings: Settings, status: int) -> None:
        client = _mock_client(httpx.Response(status, text="nope"))
        with (
            patch.object(image_generator, "get_http_client", return_value=client),
            pytest.raises(UpstreamError, match=str(status)),
        ):
            await image_generator.generate_image("x", test_settings)

    async def test_transport_failure(self, test_settings: Settings) -> None:
        client = _mock_client(error=httpx.ConnectError("connection refused"))
        with (
            patch.object(image_generator, "get_http_client", return_value=client),
            pytest.raises(UpstreamError, match="connection refused"),
        ):
            await image_generator.generate_image("x", test_settings)


class TestHttpClient:
    def test_creates_client_lazily(self) -> None:
        original = http_client._client
        try:
            http_client._client = None
            client = http_client.get_http_client()
            assert client is not None
            assert http_client._client is client
            assert http_client.get_http_client() is client
        finally:
            http_client._client = original

    def test_built_from_module_settings(self, test_settings: Settings) -> None:
        configured = test_settings.model_copy(update={"fetch_timeout": 7.5, "proxies": ["http://proxy:8080"]})
        original = http_client._client
        try:
            http_client._client = None
            with (
                patch.object(http_client, "settings", configured),
                patch.object(http_client, "AsyncProxyHttpClient") as client_cls,
            ):
                client = http_client.get_http_client()
                assert http_client.get_http_client() is client
            client_cls.assert_called_once()
            kwargs = client_cls.call_args.kwargs
            assert kwargs["timeout"] == 7.5
            assert kwargs["proxies"] == ["http://proxy:8080"]
            assert kwargs["retry"].max_attempts == 1
        finally:
            http_client._client = original

    async def test_close_when_client_exists(self) -> None:
        mock_client = AsyncMock()
        original = http_client._client
        try:
            http_client._client = mock_client
            await http_client.close_client()
            mock_client.aclose.assert_called_once()
            assert http_client._client is None
        finally:
            http_client._client = original

    async def test_close_when_no_client(self) -> None:
        original = http_client._client
        try:
            http_client._client = None
            await http_client.close_client()
            assert http_client._client is None
        finally:
            http_client._client = original
