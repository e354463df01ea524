import io

import pytest
from PIL import Image

from conftest import make_png
from imageproc.models.image import ProcessingRequest
from imageproc.models.operation import Operation, UnknownOperation
from imageproc.services.transforms import (
    TRANSFORMS,
    apply_operation,
    blur_image,
    brighten_image,
    flip_image,
    grayscale_image,
    parse_float,
    parse_int,
    parse_uint,
    resize_image,
    rotate_image,
)


@pytest.fixture
def image() -> Image.Image:
    return Image.open(io.BytesIO(make_png(4, 2)))


def _request(operation: Operation, *params: str) -> ProcessingRequest:
    return ProcessingRequest(filename="x.png", operation=operation, params=params or None)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("50", 50),
        ("+50", 50),
        ("4294967295", 4294967295),
        (None, 100),
        ("abc", 100),
        ("0", 100),
        ("-5", 100),
        ("2.5", 100),
        ("4294967296", 100),
        ("5_0", 100),
        (" 50 ", 100),
        ("٥٠", 100),
        ("", 100),
    ],
)
def test_parse_uint_falls_back_to_default(value, expected):
    assert parse_uint(value, 100) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("-20", -20),
        ("2147483647", 2147483647),
        ("-2147483648", -2147483648),
        ("bright", 10),
        ("2147483648", 10),
        ("-2147483649", 10),
        ("1_0", 10),
        ("-", 10),
        ("²", 10),
    ],
)
def test_parse_int_accepts_only_i32_literals(value, expected):
    assert parse_int(value, 10) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [("2.5", 2.5), ("1e30", 1e30), ("nan", 1.0), ("-1", 1.0), ("soft", 1.0), ("1_0", 1.0), (" 2 ", 1.0)],
)
def test_parse_float_falls_back_to_default(value, expected):
    assert parse_float(value, 1.0) == expected


def test_every_operation_has_a_transform():
    assert set(TRANSFORMS) == set(Operation)


def test_operation_parse_is_case_sensitive():
    assert Operation.parse("resize") is Operation.RESIZE
    with pytest.raises(UnknownOperation, match="Unknown operation: Resize"):
        Operation.parse("Resize")


def test_resize_is_exact_and_ignores_aspect_ratio(image):
    assert resize_image(image, 50, 50).size == (50, 50)


def test_resize_without_params_uses_default_dimensions(image):
    assert apply_operation(image, _request(Operation.RESIZE)).size == (100, 100)


def test_resize_with_bad_height_keeps_parsed_width(image):
    assert apply_operation(image, _request(Operation.RESIZE, "30", "tall")).size == (30, 100)


def test_grayscale_keeps_color_model(image):
    result = grayscale_image(image)
    assert result.mode == "RGB"
    r, g, b = result.getpixel((3, 1))
    assert r == g == b


def test_grayscale_keeps_alpha():
    rgba = Image.open(io.BytesIO(make_png(3, 3, mode="RGBA")))
    result = grayscale_image(rgba)
    assert result.mode == "RGBA"
    assert result.getpixel((1, 1))[3] == 200


def test_blur_preserves_size(image):
    assert blur_image(image, 2.0).size == image.size


def test_blur_huge_sigma_is_capped_at_image_size(image):
    result = blur_image(image, 1e30)
    assert result.size == image.size
    assert result.tobytes() == blur_image(image, max(image.size)).tobytes()


def test_brighten_clamps_channels():
    img = Image.new("RGB", (1, 1), (250, 10, 0))
    assert brighten_image(img, 10).getpixel((0, 0)) == (255, 20, 10)
    assert brighten_image(img, -20).getpixel((0, 0)) == (230, 0, 0)


def test_brighten_leaves_alpha_untouched():
    img = Image.new("RGBA", (1, 1), (100, 100, 100, 50))
    assert brighten_image(img, 30).getpixel((0, 0)) == (130, 130, 130, 50)


def test_rotate_90_is_clockwise(image):
    result = rotate_image(image, 90)
    assert result.size == (2, 4)
    # Clockwise: the bottom-left source pixel becomes the top-left one.
    assert result.getpixel((0, 0)) == image.getpixel((0, image.height - 1))


@pytest.mark.parametrize("degrees", [0, 45, 360, -90])
def test_rotate_unsupported_degrees_falls_back_to_90(image, degrees):
    assert rotate_image(image, degrees).tobytes() == rotate_image(image, 90).tobytes()


def test_rotate_unparsable_degrees_uses_default(image):
    result = apply_operation(image, _request(Operation.ROTATE, "quarter"))
    assert result.tobytes() == rotate_image(image, 90).tobytes()


def test_rotate_180_and_270(image):
    assert rotate_image(image, 180).size == image.size
    assert rotate_image(image, 270).getpixel((0, 0)) == image.getpixel((image.width - 1, 0))


def test_flip_unknown_direction_falls_back_to_horizontal(image):
    assert flip_image(image, "diagonal").tobytes() == flip_image(image, "horizontal").tobytes()


def test_flip_directions(image):
    horizontal = flip_image(image, "horizontal")
    vertical = flip_image(image, "vertical")
    assert horizontal.getpixel((0, 0)) == image.getpixel((image.width - 1, 0))
    assert vertical.getpixel((0, 0)) == image.getpixel((0, image.height - 1))


def test_flip_without_params_is_horizontal(image):
    result = apply_operation(image, _request(Operation.FLIP))
    assert result.tobytes() == flip_image(image, "horizontal").tobytes()


def test_palette_images_are_converted_before_resampling():
    palette = Image.new("P", (10, 10), 3)
    assert resize_image(palette, 5, 5).mode == "RGB"
