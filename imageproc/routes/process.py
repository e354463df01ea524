import asyncio

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from imageproc.config import Settings
from imageproc.dependencies import get_settings
from imageproc.models.image import ImageProcessingResponse, ProcessImageRequest, ProcessingRequest
from imageproc.models.operation import Operation, UnknownOperation
from imageproc.services.processing import ImageLoadError, ImageSaveError, ImageTransformError, process_image

router = APIRouter(prefix="/process", tags=["process"])


def _failure(status_code: int, message: str, filename: str) -> JSONResponse:
    body = ImageProcessingResponse(success=False, message=message, original_filename=filename)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post("", response_model=ImageProcessingResponse)
async def process(payload: ProcessImageRequest, app_settings: Settings = Depends(get_settings)) -> JSONResponse:
    try:
        operation = Operation.parse(payload.operation)
    except UnknownOperation as exc:
        logger.info("Process rejected filename={} operation={}", payload.filename, payload.operation)
        return _failure(400, str(exc), payload.filename)

    request = ProcessingRequest(
        filename=payload.filename,
        operation=operation,
        params=None if payload.params is None else tuple(payload.params),
    )
    try:
        processed = await asyncio.to_thread(process_image, request, app_settings)
    except ImageLoadError as exc:
        return _failure(500, f"Failed to open image: {exc}", payload.filename)
    except ImageTransformError as exc:
        return _failure(500, f"Failed to process image: {exc}", payload.filename)
    except ImageSaveError as exc:
        return _failure(500, f"Failed to save processed image: {exc}", payload.filename)

    body = ImageProcessingResponse(
        success=True,
        message=f"Image processed with {operation.value} operation",
        original_filename=payload.filename,
        processed_filename=processed.filename,
    )
    return JSONResponse(status_code=200, content=body.model_dump())
