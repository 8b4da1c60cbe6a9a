"""
Unit tests for the DSK and NIB image containers.
"""

import numpy as np
import pytest

from nib_converter.imaging import DSK_IMAGE_SIZE, NIB_IMAGE_SIZE, DiskImage, NibImage
from tests.fixtures import create_pattern_image, pattern_payload


class TestDiskImage:
    """Test the logical image container."""

    def test_sizes(self):
        """Test architectural image sizes."""
        assert DSK_IMAGE_SIZE == 143360
        assert NIB_IMAGE_SIZE == 232960
        assert len(DiskImage()) == DSK_IMAGE_SIZE

    def test_new_image_is_zeroed(self):
        """Test a new image is all zero bytes."""
        assert DiskImage().to_bytes() == bytes(DSK_IMAGE_SIZE)

    def test_bytes_layout(self):
        """Test tracks and sectors are laid out in ascending order."""
        raw = create_pattern_image().to_bytes()
        assert raw[:256] == pattern_payload(0, 0)
        assert raw[256:512] == pattern_payload(0, 1)
        assert raw[4096:4352] == pattern_payload(1, 0)

    def test_from_bytes_round_trip(self):
        """Test from_bytes and to_bytes are inverses."""
        raw = bytes(i % 251 for i in range(DSK_IMAGE_SIZE))
        assert DiskImage.from_bytes(raw).to_bytes() == raw

    def test_from_bytes_wrong_size(self):
        """Test a buffer of the wrong size is rejected."""
        with pytest.raises(ValueError):
            DiskImage.from_bytes(bytes(DSK_IMAGE_SIZE - 1))

    def test_wrong_array_shape(self):
        """Test arrays of the wrong shape are rejected."""
        with pytest.raises(ValueError):
            DiskImage(np.zeros((35, 16, 255), dtype=np.uint8))

    def test_sector_access(self):
        """Test single sector get and set."""
        image = DiskImage()
        image.set_sector(34, 15, bytes([0xA5]) * 256)
        assert image.get_sector(34, 15) == bytes([0xA5]) * 256
        assert image.get_sector(34, 14) == bytes(256)

    def test_bad_track(self):
        """Test track numbers outside 0-34 raise IndexError."""
        with pytest.raises(IndexError):
            DiskImage().get_sector(35, 0)

    @pytest.mark.parametrize("sector", [-1, 16])
    def test_bad_sector(self, sector):
        """Test sector numbers outside 0-15 raise IndexError."""
        image = DiskImage()
        with pytest.raises(IndexError):
            image.get_sector(0, sector)
        with pytest.raises(IndexError):
            image.set_sector(0, sector, bytes(256))
        assert image == DiskImage()

    def test_equality(self):
        """Test images compare by contents."""
        assert create_pattern_image() == create_pattern_image()
        assert create_pattern_image() != DiskImage()

    def test_from_tracks(self):
        """Test building an image from track lists."""
        tracks = [[pattern_payload(t, s) for s in range(16)] for t in range(35)]
        assert DiskImage.from_tracks(tracks) == create_pattern_image()


class TestNibImage:
    """Test the nibble image container."""

    def test_length(self):
        """Test nibble image size."""
        assert len(NibImage()) == NIB_IMAGE_SIZE

    def test_track_access(self):
        """Test whole-track get and set."""
        image = NibImage()
        image.set_track(2, bytes([0xFF]) * 6656)
        assert image.get_track(2) == bytes([0xFF]) * 6656
        assert image.to_bytes()[2 * 6656:3 * 6656] == bytes([0xFF]) * 6656

    def test_wrong_track_length(self):
        """Test tracks must be 6656 bytes."""
        with pytest.raises(ValueError):
            NibImage().set_track(0, bytes(6655))

    def test_from_bytes_wrong_size(self):
        """Test a buffer of the wrong size is rejected."""
        with pytest.raises(ValueError):
            NibImage.from_bytes(bytes(DSK_IMAGE_SIZE))
