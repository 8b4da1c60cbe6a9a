"""
Unit tests for image format detection and file I/O.
"""

import pytest

from nib_converter.imaging import (
    DSK_IMAGE_SIZE,
    NIB_IMAGE_SIZE,
    DiskImage,
    ImageCorruptError,
    ImageFormat,
    ImageFormatError,
    ImageReadError,
    ImageWriteError,
    NibImage,
    detect_format,
    get_expected_size,
    is_nibble_format,
    read_disk_image,
    read_nib_image,
    write_image,
)
from tests.fixtures import create_pattern_image


class TestFormatDetection:
    """Test format detection by size and extension."""

    def test_detect_nib_by_size(self, tmp_path):
        """Test a 232,960-byte file is NIB whatever its extension."""
        path = tmp_path / "image.bin"
        path.write_bytes(bytes(NIB_IMAGE_SIZE))
        assert detect_format(path) == ImageFormat.NIB

    def test_detect_dsk_by_size(self, tmp_path):
        """Test a 143,360-byte file is DSK."""
        path = tmp_path / "image.img"
        path.write_bytes(bytes(DSK_IMAGE_SIZE))
        assert detect_format(path) == ImageFormat.DSK

    def test_detect_do_keeps_extension(self, tmp_path):
        """Test a DSK-sized .do file is reported as DO."""
        path = tmp_path / "image.do"
        path.write_bytes(bytes(DSK_IMAGE_SIZE))
        assert detect_format(path) == ImageFormat.DO

    def test_detect_by_extension(self, tmp_path):
        """Test odd-sized files fall back to the extension."""
        path = tmp_path / "image.nib"
        path.write_bytes(bytes(10))
        assert detect_format(path) == ImageFormat.NIB

    def test_detect_unknown(self, tmp_path):
        """Test unknown size and extension."""
        path = tmp_path / "image.txt"
        path.write_bytes(bytes(10))
        assert detect_format(path) == ImageFormat.UNKNOWN

    def test_detect_missing_file(self, tmp_path):
        """Test detection of a missing file raises ImageReadError."""
        with pytest.raises(ImageReadError):
            detect_format(tmp_path / "missing.dsk")

    def test_expected_sizes(self):
        """Test fixed format sizes."""
        assert get_expected_size(ImageFormat.DSK) == 143360
        assert get_expected_size(ImageFormat.DO) == 143360
        assert get_expected_size(ImageFormat.NIB) == 232960
        with pytest.raises(ImageFormatError):
            get_expected_size(ImageFormat.UNKNOWN)

    def test_is_nibble_format(self):
        """Test only NIB holds raw disk bytes."""
        assert is_nibble_format(ImageFormat.NIB)
        assert not is_nibble_format(ImageFormat.DSK)


class TestReadWrite:
    """Test reading and writing image files."""

    def test_disk_image_round_trip(self, tmp_path):
        """Test a DSK image survives write and read."""
        path = tmp_path / "pattern.dsk"
        image = create_pattern_image()
        write_image(image, path)
        assert path.stat().st_size == DSK_IMAGE_SIZE
        assert read_disk_image(path) == image

    def test_nib_image_round_trip(self, tmp_path):
        """Test a NIB image survives write and read."""
        path = tmp_path / "blank.nib"
        image = NibImage()
        image.set_track(0, bytes([0xFF]) * 6656)
        write_image(image, path)
        assert read_nib_image(path) == image

    def test_read_wrong_size(self, tmp_path):
        """Test a short DSK file raises ImageCorruptError with sizes."""
        path = tmp_path / "short.dsk"
        path.write_bytes(bytes(1000))

        with pytest.raises(ImageCorruptError) as exc_info:
            read_disk_image(path)

        assert exc_info.value.expected_size == DSK_IMAGE_SIZE
        assert exc_info.value.actual_size == 1000
        assert "[Expected: 143360, Actual: 1000]" in str(exc_info.value)

    def test_read_dsk_as_nib(self, tmp_path):
        """Test a DSK-sized file is not accepted as NIB."""
        path = tmp_path / "disk.nib"
        write_image(DiskImage(), path)
        with pytest.raises(ImageCorruptError):
            read_nib_image(path)

    def test_read_missing_file(self, tmp_path):
        """Test a missing input raises ImageReadError."""
        with pytest.raises(ImageReadError):
            read_disk_image(tmp_path / "missing.dsk")

    def test_write_to_missing_directory(self, tmp_path):
        """Test an unwritable output raises ImageWriteError."""
        with pytest.raises(ImageWriteError):
            write_image(DiskImage(), tmp_path / "no" / "such" / "dir.dsk")
