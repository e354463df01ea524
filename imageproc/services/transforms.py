import math
from collections.abc import Callable

from loguru import logger
from PIL import Image, ImageFilter, ImageOps

from imageproc.models.image import ProcessingRequest
from imageproc.models.operation import FlipDirection, Operation

DEFAULT_WIDTH = 100
DEFAULT_HEIGHT = 100
DEFAULT_SIGMA = 1.0
DEFAULT_BRIGHTNESS = 10
DEFAULT_DEGREES = 90
DEFAULT_DIRECTION = FlipDirection.HORIZONTAL

UINT_MAX = 2**32 - 1
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

_ROTATIONS = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def _is_integer_literal(value: str) -> bool:
    digits = value[1:] if value[:1] in ("+", "-") else value
    return digits.isascii() and digits.isdigit()


def parse_uint(value: str | None, default: int) -> int:
    if value is None or not _is_integer_literal(value):
        return default
    parsed = int(value)
    return parsed if 0 < parsed <= UINT_MAX else default


def parse_int(value: str | None, default: int) -> int:
    if value is None or not _is_integer_literal(value):
        return default
    parsed = int(value)
    return parsed if INT_MIN <= parsed <= INT_MAX else default


def parse_float(value: str | None, default: float) -> float:
    # float() also takes "1_0" and surrounding whitespace.
    if value is None or not value.isascii() or "_" in value or value.strip() != value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if math.isfinite(parsed) and parsed >= 0 else default


def _normalize_mode(img: Image.Image) -> Image.Image:
    if img.mode in ("L", "LA", "RGB", "RGBA"):
        return img
    if img.mode in ("PA", "La") or "transparency" in img.info:
        return img.convert("RGBA")
    return img.convert("RGB")


def resize_image(img: Image.Image, width: int, height: int) -> Image.Image:
    return _normalize_mode(img).resize((width, height), Image.Resampling.LANCZOS)


def grayscale_image(img: Image.Image) -> Image.Image:
    img = _normalize_mode(img)
    if img.mode in ("L", "LA"):
        return img.copy()
    gray = ImageOps.grayscale(img)
    if img.mode == "RGBA":
        return Image.merge("RGBA", (gray, gray, gray, img.getchannel("A")))
    return gray.convert(img.mode)


def blur_image(img: Image.Image, sigma: float) -> Image.Image:
    # Beyond the image size the result no longer changes; huge radii crash the C filter.
    radius = min(sigma, max(img.size))
    return _normalize_mode(img).filter(ImageFilter.GaussianBlur(radius=radius))


def brighten_image(img: Image.Image, value: int) -> Image.Image:
    img = _normalize_mode(img)
    lut = [min(255, max(0, level + value)) for level in range(256)]
    bands = img.split()
    # Alpha is always the last band in L/LA/RGB/RGBA.
    color_count = len(bands) - 1 if img.mode.endswith("A") else len(bands)
    adjusted = [band.point(lut) for band in bands[:color_count]]
    return Image.merge(img.mode, adjusted + list(bands[color_count:]))


def rotate_image(img: Image.Image, degrees: int) -> Image.Image:
    method = _ROTATIONS.get(degrees)
    if method is None:
        logger.warning("Rotation is limited to 90, 180, or 270 degrees; using 90 degrees={}", degrees)
        method = _ROTATIONS[DEFAULT_DEGREES]
    return img.transpose(method)


def flip_image(img: Image.Image, direction: str) -> Image.Image:
    if direction == FlipDirection.VERTICAL.value:
        return img.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    if direction != FlipDirection.HORIZONTAL.value:
        logger.warning("Unknown flip direction; using horizontal direction={}", direction)
    return img.transpose(Image.Transpose.FLIP_LEFT_RIGHT)


def _resize(img: Image.Image, request: ProcessingRequest) -> Image.Image:
    width = parse_uint(request.param(0), DEFAULT_WIDTH)
    height = parse_uint(request.param(1), DEFAULT_HEIGHT)
    return resize_image(img, width, height)


def _grayscale(img: Image.Image, request: ProcessingRequest) -> Image.Image:
    return grayscale_image(img)


def _blur(img: Image.Image, request: ProcessingRequest) -> Image.Image:
    return blur_image(img, parse_float(request.param(0), DEFAULT_SIGMA))


def _brighten(img: Image.Image, request: ProcessingRequest) -> Image.Image:
    return brighten_image(img, parse_int(request.param(0), DEFAULT_BRIGHTNESS))


def _rotate(img: Image.Image, request: ProcessingRequest) -> Image.Image:
    return rotate_image(img, parse_int(request.param(0), DEFAULT_DEGREES))


def _flip(img: Image.Image, request: ProcessingRequest) -> Image.Image:
    direction = request.param(0)
    return flip_image(img, DEFAULT_DIRECTION.value if direction is None else direction)


TRANSFORMS: dict[Operation, Callable[[Image.Image, ProcessingRequest], Image.Image]] = {
    Operation.RESIZE: _resize,
    Operation.GRAYSCALE: _grayscale,
    Operation.BLUR: _blur,
    Operation.BRIGHTEN: _brighten,
    Operation.ROTATE: _rotate,
    Operation.FLIP: _flip,
}

_missing = set(Operation) - set(TRANSFORMS)
if _missing:
    raise RuntimeError(f"Operations without a transform: {sorted(op.value for op in _missing)}")


def apply_operation(img: Image.Image, request: ProcessingRequest) -> Image.Image:
    return TRANSFORMS[request.operation](img, request)
