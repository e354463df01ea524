import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from imageproc.config import Settings
from imageproc.main import create_app


def make_png(width: int = 8, height: int = 6, mode: str = "RGB") -> bytes:
    """Build a small PNG whose pixels all differ, so orientation changes are visible."""
    img = Image.new(mode, (width, height))
    for x in range(width):
        for y in range(height):
            color = (x * 30 % 256, y * 40 % 256, (x + y) * 10 % 256)
            img.putpixel((x, y), color + (200,) if mode == "RGBA" else color)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def app_settings(tmp_path) -> Settings:
    return Settings(
        upload_dir=str(tmp_path / "uploads"),
        processed_dir=str(tmp_path / "processed"),
        static_dir=str(tmp_path / "static"),
        log_level="DEBUG",
    )


@pytest.fixture
def client(app_settings: Settings):
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client


@pytest.fixture
def upload(client: TestClient, png_bytes: bytes):
    def _upload(content: bytes = png_bytes, name: str = "cat.png") -> str:
        response = client.post("/upload", files={"image": (name, content, "image/png")})
        assert response.status_code == 200, response.text
        return response.json()["original_filename"]

    return _upload
