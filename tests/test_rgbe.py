import io

import numpy as np
import pytest

from flightx.rgbe import (
    HeaderInfo,
    RGBEError,
    float_to_rgbe,
    read_hdr,
    read_header,
    read_pixels,
    read_pixels_raw,
    read_pixels_raw_rle,
    read_pixels_rle,
    rgbe_to_float,
    write_header,
    write_pixels,
    write_pixels_rle,
)


def _random_pixels(count, seed=7):
    rng = np.random.default_rng(seed)
    return rng.uniform(0.0, 4.0, size=(count, 3))


def _flat_round_trip(pixels):
    buf = io.BytesIO()
    write_pixels(buf, pixels)
    buf.seek(0)
    return read_pixels(buf, len(pixels))


def test_unit_white_encodes_to_half_mantissa():
    assert float_to_rgbe(1.0, 1.0, 1.0) == bytes([128, 128, 128, 129])


def test_unit_white_decodes_exactly():
    assert rgbe_to_float(bytes([128, 128, 128, 129])) == (1.0, 1.0, 1.0)


def test_black_encodes_to_zero_bytes():
    assert float_to_rgbe(0.0, 0.0, 0.0) == bytes(4)


def test_zero_exponent_decodes_to_black():
    assert rgbe_to_float(bytes([200, 10, 5, 0])) == (0.0, 0.0, 0.0)


@pytest.mark.parametrize(
    "pixel", [(0.5, 0.25, 0.125), (3.7, 1.2, 0.01), (1000.0, 2.0, 999.0), (1e-5, 2e-5, 0.0)]
)
def test_pixel_round_trip_within_precision(pixel):
    decoded = rgbe_to_float(float_to_rgbe(*pixel))
    brightest = max(pixel)
    for original, value in zip(pixel, decoded):
        assert value <= original + 1e-12
        assert original - value <= brightest / 128


def test_encoding_is_stable_after_one_round_trip():
    encoded = float_to_rgbe(2.3, 0.7, 1.9)
    assert float_to_rgbe(*rgbe_to_float(encoded)) == encoded


def test_default_header_bytes():
    buf = io.BytesIO()
    write_header(buf, 4, 2)
    assert buf.getvalue() == b"#?RGBE\nFORMAT=32-bit_rle_rgbe\n\n-Y 2 +X 4\n"


def test_header_round_trip_with_info():
    buf = io.BytesIO()
    write_header(buf, 640, 480, HeaderInfo(programtype="RADIANCE", gamma=2.2, exposure=0.5))
    buf.seek(0)
    width, height, info = read_header(buf)
    assert (width, height) == (640, 480)
    assert info.programtype == "RADIANCE"
    assert info.gamma == pytest.approx(2.2)
    assert info.exposure == pytest.approx(0.5)


def test_header_without_optional_fields():
    buf = io.BytesIO()
    write_header(buf, 3, 5)
    buf.seek(0)
    width, height, info = read_header(buf)
    assert (width, height) == (3, 5)
    assert info.programtype == "RGBE"
    assert info.gamma is None and info.exposure is None


def test_header_programtype_is_truncated():
    name = "ABCDEFGHIJKLMNOPQRSTUV"
    buf = io.BytesIO(f"#?{name}\nFORMAT=32-bit_rle_rgbe\n\n-Y 1 +X 1\n".encode())
    _, _, info = read_header(buf)
    assert info.programtype == name[:15]


def test_header_leaves_stream_at_pixels():
    buf = io.BytesIO()
    write_header(buf, 2, 1)
    write_pixels(buf, [[1.0, 1.0, 1.0], [0.0, 0.0, 0.0]])
    buf.seek(0)
    width, height, _ = read_header(buf)
    pixels = read_pixels(buf, width * height)
    assert pixels.tolist() == [[1.0, 1.0, 1.0], [0.0, 0.0, 0.0]]


def test_header_without_format_raises():
    buf = io.BytesIO(b"#?RGBE\n\n-Y 1 +X 1\n")
    with pytest.raises(RGBEError):
        read_header(buf)


def test_header_empty_stream_raises():
    with pytest.raises(RGBEError):
        read_header(io.BytesIO(b""))


def test_header_missing_size_raises():
    with pytest.raises(RGBEError):
        read_header(io.BytesIO(b"#?RGBE\nFORMAT=32-bit_rle_rgbe\n\n"))


def test_flat_pixels_round_trip_matches_scalar_codec():
    pixels = _random_pixels(20)
    decoded = _flat_round_trip(pixels)
    expected = [rgbe_to_float(float_to_rgbe(*p)) for p in pixels]
    np.testing.assert_allclose(decoded, expected, rtol=1e-6)


def test_flat_pixels_use_four_bytes_each():
    buf = io.BytesIO()
    pixels = _random_pixels(9)
    write_pixels(buf, pixels)
    assert len(buf.getvalue()) == 4 * len(pixels)


def test_read_pixels_short_stream_raises():
    with pytest.raises(RGBEError):
        read_pixels(io.BytesIO(bytes(7)), 2)


def test_read_pixels_raw_returns_bytes():
    raw = read_pixels_raw(io.BytesIO(bytes([1, 2, 3, 4, 5, 6, 7, 8])), 2)
    assert raw.tolist() == [[1, 2, 3, 4], [5, 6, 7, 8]]


@pytest.mark.parametrize("width,lines", [(16, 3), (8, 1), (300, 2)])
def test_rle_round_trip_matches_flat(width, lines):
    pixels = _random_pixels(width * lines, seed=width)
    pixels[: width // 2] = [1.5, 0.5, 0.25]
    buf = io.BytesIO()
    write_pixels_rle(buf, pixels, width, lines)
    buf.seek(0)
    decoded = read_pixels_rle(buf, width, lines)
    np.testing.assert_array_equal(decoded, _flat_round_trip(pixels))
    assert buf.read() == b""


def test_rle_compresses_constant_image():
    width, lines = 64, 4
    pixels = np.full((width * lines, 3), 0.75)
    buf = io.BytesIO()
    write_pixels_rle(buf, pixels, width, lines)
    assert len(buf.getvalue()) < 4 * width * lines
    buf.seek(0)
    decoded = read_pixels_rle(buf, width, lines)
    np.testing.assert_array_equal(decoded, _flat_round_trip(pixels))


def test_rle_narrow_scanline_is_written_flat():
    pixels = _random_pixels(10)
    rle = io.BytesIO()
    write_pixels_rle(rle, pixels, 5, 2)
    flat = io.BytesIO()
    write_pixels(flat, pixels)
    assert rle.getvalue() == flat.getvalue()


def test_rle_reader_accepts_flat_data():
    width, lines = 16, 2
    pixels = _random_pixels(width * lines)
    buf = io.BytesIO()
    write_pixels(buf, pixels)
    buf.seek(0)
    decoded = read_pixels_rle(buf, width, lines)
    np.testing.assert_array_equal(decoded, _flat_round_trip(pixels))


def test_raw_rle_matches_encoded_bytes():
    width, lines = 12, 2
    pixels = _random_pixels(width * lines, seed=3)
    buf = io.BytesIO()
    write_pixels_rle(buf, pixels, width, lines)
    buf.seek(0)
    raw = read_pixels_raw_rle(buf, width, lines)
    expected = [list(float_to_rgbe(*p)) for p in pixels]
    assert raw.tolist() == expected


def test_rle_wrong_scanline_width_raises():
    buf = io.BytesIO()
    write_pixels_rle(buf, _random_pixels(16), 16, 1)
    buf.seek(0)
    with pytest.raises(RGBEError, match="wrong scanline width"):
        read_pixels_rle(buf, 20, 1)


def test_rle_zero_count_raises():
    buf = io.BytesIO(bytes([2, 2, 0, 8, 0, 0]))
    with pytest.raises(RGBEError, match="bad scanline data"):
        read_pixels_rle(buf, 8, 1)


def test_rle_overlong_run_raises():
    buf = io.BytesIO(bytes([2, 2, 0, 8, 128 + 9, 1]))
    with pytest.raises(RGBEError, match="bad scanline data"):
        read_pixels_rle(buf, 8, 1)


def test_rle_truncated_stream_raises():
    buf = io.BytesIO()
    write_pixels_rle(buf, _random_pixels(32), 16, 2)
    data = buf.getvalue()[:-3]
    with pytest.raises(RGBEError):
        read_pixels_rle(io.BytesIO(data), 16, 2)


def test_write_rle_requires_enough_pixels():
    with pytest.raises(ValueError):
        write_pixels_rle(io.BytesIO(), _random_pixels(10), 16, 1)


def test_read_hdr_file(tmp_path):
    width, height = 24, 6
    pixels = _random_pixels(width * height, seed=11)
    path = tmp_path / "image.hdr"
    with open(path, "wb") as stream:
        write_header(stream, width, height, HeaderInfo(exposure=2.0))
        write_pixels_rle(stream, pixels, width, height)
    image, info = read_hdr(path)
    assert image.shape == (height, width, 3)
    assert info.exposure == 2.0
    np.testing.assert_array_equal(image.reshape(-1, 3), _flat_round_trip(pixels))