import asyncio
from pathlib import Path
from uuid import uuid4

from loguru import logger
from starlette.datastructures import UploadFile
from werkzeug.utils import secure_filename

from imageproc.config import Settings
from imageproc.models.image import StoredImage

PLACEHOLDER_NAME = "unknown"


def sanitize_filename(original_name: str | None) -> str:
    safe_name = secure_filename(original_name or "")
    return safe_name or PLACEHOLDER_NAME


def generate_filename(original_name: str | None) -> str:
    return f"{uuid4()}-{sanitize_filename(original_name)}"


async def _write_chunks(field: UploadFile | str, destination: Path, chunk_size: int) -> int:
    handle = await asyncio.to_thread(destination.open, "wb")
    written = 0
    try:
        if isinstance(field, str):
            data = field.encode("utf-8")
            await asyncio.to_thread(handle.write, data)
            return len(data)
        while chunk := await field.read(chunk_size):
            await asyncio.to_thread(handle.write, chunk)
            written += len(chunk)
        return written
    finally:
        await asyncio.to_thread(handle.close)


async def save_upload(field: UploadFile | str, app_settings: Settings) -> StoredImage:
    """Store one multipart field under the upload directory.

    ``field`` is either a file part or, when the client sent no filename, the
    plain form value. The stored name is a fresh uuid4 token followed by the
    sanitized original name, so two uploads never share a file.
    """
    original_name = field.filename if isinstance(field, UploadFile) else None
    filename = generate_filename(original_name)
    destination = app_settings.upload_path / filename

    size_bytes = await _write_chunks(field, destination, app_settings.upload_chunk_size)
    logger.debug(
        "File saved filename={} destination={} size_bytes={}",
        filename,
        str(destination),
        size_bytes,
    )
    return StoredImage(filename=filename, path=destination, size_bytes=size_bytes)


def resolve_upload_path(filename: str, app_settings: Settings) -> Path:
    # Only plain names inside the upload directory are addressable.
    if not filename or Path(filename).name != filename or filename in {".", ".."}:
        logger.warning("Rejected upload filename filename={}", filename)
        raise FileNotFoundError(f"No such file: {filename!r}")
    return app_settings.upload_path / filename
