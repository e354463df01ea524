from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger

from imageproc.config import Settings
from imageproc.dependencies import get_settings
from imageproc.models.image import ImageProcessingResponse, StoredImage
from imageproc.services.storage import save_upload

router = APIRouter(prefix="/upload", tags=["upload"])

IMAGE_FIELD = "image"


def _respond(status_code: int, body: ImageProcessingResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post("", response_model=ImageProcessingResponse)
async def upload_image(request: Request, app_settings: Settings = Depends(get_settings)) -> JSONResponse:
    stored: StoredImage | None = None
    async with request.form() as form:
        fields = form.getlist(IMAGE_FIELD)
        logger.info("Upload request field_count={} image_fields={}", len(form), len(fields))
        if len(fields) > 1:
            logger.warning("Multiple image fields received; storing the first only count={}", len(fields))
        if fields:
            try:
                stored = await save_upload(fields[0], app_settings)
            except OSError as exc:
                logger.error("Upload write failed error={}", str(exc))
                return _respond(
                    500,
                    ImageProcessingResponse(
                        success=False,
                        message=f"Failed to store uploaded image: {exc}",
                        original_filename="",
                    ),
                )

    if stored is None:
        logger.info("Upload rejected reason=no_image_field")
        return _respond(
            400,
            ImageProcessingResponse(success=False, message="No image uploaded", original_filename=""),
        )

    logger.info("Upload stored filename={} size_bytes={}", stored.filename, stored.size_bytes)
    return _respond(
        200,
        ImageProcessingResponse(
            success=True,
            message="Image uploaded successfully",
            original_filename=stored.filename,
        ),
    )
