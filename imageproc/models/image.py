from pathlib import Path

from pydantic import BaseModel, ConfigDict

from imageproc.models.operation import Operation


class StoredImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    path: Path
    size_bytes: int


class ProcessImageRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    filename: str
    operation: str
    params: list[str] | None = None


class ProcessingRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    operation: Operation
    params: tuple[str, ...] | None = None

    def param(self, index: int) -> str | None:
        if self.params is None or index >= len(self.params):
            return None
        return self.params[index]


class ProcessedImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    path: Path


class ImageProcessingResponse(BaseModel):
    success: bool
    message: str
    original_filename: str
    processed_filename: str | None = None
