from __future__ import annotations

import pytest
from PIL import Image

from photostamp.errors import ImageConsumedError
from photostamp.raster import RESOLUTION_TAGS, RasterImage, TagId


def test_properties(make_image):
    image = make_image(300, 200)

    assert image.size == (300, 200)
    assert image.width == 300
    assert image.height == 200
    assert image.longest_side == 300
    assert image.is_truecolor
    assert not image.is_indexed
    assert image.dpi == (96.0, 96.0)


def test_longest_side_of_portrait_and_square():
    assert RasterImage(Image.new("RGB", (20, 50))).longest_side == 50
    assert RasterImage(Image.new("RGB", (40, 40))).longest_side == 40


def test_indexed_modes(make_image):
    image = make_image(32, 32, mode="P")

    assert image.is_indexed
    assert not image.is_truecolor


def test_tags_are_copied_on_construction(exif_tags):
    image = RasterImage(Image.new("RGB", (4, 4)), tags=exif_tags)
    exif_tags[TagId.ARTIST] = "someone else"

    assert TagId.ARTIST not in image.tags


def test_release_invalidates_handle(make_image):
    image = make_image(10, 10)

    image.release()

    assert not image.valid
    assert repr(image) == "<RasterImage released>"
    with pytest.raises(ImageConsumedError):
        image.pixels
    with pytest.raises(ImageConsumedError):
        image.tags
    with pytest.raises(ImageConsumedError):
        image.size


def test_release_twice_is_an_error(make_image):
    image = make_image(10, 10)
    image.release()

    with pytest.raises(ImageConsumedError):
        image.release()


def test_consumed_error_is_a_runtime_error(make_image):
    image = make_image(10, 10)
    image.release()

    with pytest.raises(RuntimeError):
        image.width


def test_repr_describes_live_image(make_image, exif_tags):
    image = make_image(12, 8, tags=exif_tags)

    assert repr(image) == "<RasterImage 12x8 mode=RGB tags=4>"


def test_resolution_tags():
    assert RESOLUTION_TAGS == {0x011A, 0x011B}
    assert TagId.ORIGINAL_DATE_TIME == 0x9003
