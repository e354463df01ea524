from pathlib import Path

from loguru import logger
from PIL import Image

from imageproc.config import Settings
from imageproc.models.image import ProcessedImage, ProcessingRequest
from imageproc.services.storage import resolve_upload_path
from imageproc.services.transforms import apply_operation

FALLBACK_STEM = "output"
FALLBACK_EXTENSION = "png"


class ImageLoadError(Exception):
    pass


class ImageSaveError(Exception):
    pass


class ImageTransformError(Exception):
    pass


def derive_output_filename(filename: str, operation: str, params: list[str] | tuple[str, ...] | None) -> str:
    """Build ``<stem>_<operation>_<params>.<ext>`` from the source filename.

    The literal parameter strings are joined, not the values the transform
    actually used, and ``default`` stands in only when no list was sent.
    """
    source = Path(filename)
    stem = source.stem or FALLBACK_STEM
    extension = source.suffix.lstrip(".") or FALLBACK_EXTENSION
    joined = "default" if params is None else "_".join(params)
    return f"{stem}_{operation}_{joined}.{extension}"


def load_image(filename: str, app_settings: Settings) -> Image.Image:
    try:
        path = resolve_upload_path(filename, app_settings)
        with Image.open(path) as img:
            img.load()
            return img.copy()
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.error("Failed to open image filename={} error={}", filename, str(exc))
        raise ImageLoadError(str(exc)) from exc


def save_image(img: Image.Image, output_filename: str, app_settings: Settings) -> ProcessedImage:
    output_path = app_settings.processed_path / output_filename
    try:
        img.save(output_path)
    except (OSError, ValueError, KeyError) as exc:
        logger.error("Failed to save image output_path={} error={}", str(output_path), str(exc))
        raise ImageSaveError(str(exc)) from exc
    logger.info("Saved processed image output_path={}", str(output_path))
    return ProcessedImage(filename=output_filename, path=output_path)


def process_image(request: ProcessingRequest, app_settings: Settings) -> ProcessedImage:
    """Decode, transform and store one image. Blocking; run it off the event loop."""
    img = load_image(request.filename, app_settings)
    logger.info(
        "Processing image filename={} operation={} params={}",
        request.filename,
        request.operation.value,
        request.params,
    )
    try:
        processed = apply_operation(img, request)
    except (OverflowError, ValueError, MemoryError) as exc:
        logger.error(
            "Failed to transform image filename={} operation={} error={}",
            request.filename,
            request.operation.value,
            str(exc),
        )
        raise ImageTransformError(str(exc)) from exc
    output_filename = derive_output_filename(request.filename, request.operation.value, request.params)
    return save_image(processed, output_filename, app_settings)
