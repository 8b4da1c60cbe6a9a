"""
Unit tests for error classification and logging helpers.
"""

import logging

from nib_converter.codec import (
    ChecksumMismatchError,
    InvalidByteError,
    MarkMismatchError,
    NibError,
    TruncatedError,
)
from nib_converter.imaging import ImageCorruptError, ImageFormatError, ImageWriteError
from nib_converter.utils import (
    get_error_severity,
    handle_conversion_error,
    is_fatal_error,
    log_error,
    log_operation,
    log_performance,
    setup_logging,
)


class TestErrorMessages:
    """Test exception message formatting."""

    def test_context_appended(self):
        """Test track and sector context is appended."""
        assert str(NibError("Sector not found", 3, 12)) == "Sector not found [T:03 S:12]"

    def test_no_context(self):
        """Test messages without context are unchanged."""
        assert str(NibError("Sector not found")) == "Sector not found"

    def test_truncated_message(self):
        """Test truncation reports state and offset."""
        error = TruncatedError("READ_SECTOR", 56, 0)
        assert str(error) == "Unexpected end of track data [T:00] [State: READ_SECTOR, offset 56]"

    def test_mark_mismatch_message(self):
        """Test mark mismatch reports the byte found and expected."""
        error = MarkMismatchError("data epilog", 0xAA, 0x00, 414, 1, 2)
        assert "data epilog mismatch (00)" in str(error)
        assert "expected 0xAA" in str(error)


class TestErrorClassification:
    """Test fatal and severity classification."""

    def test_checksum_errors_are_recoverable(self):
        """Test checksum mismatches are not fatal."""
        error = ChecksumMismatchError("data", 0, 0x21, 4, 5)
        assert not is_fatal_error(error)
        assert get_error_severity(error) == "warning"

    def test_codec_errors_are_fatal(self):
        """Test framing errors are fatal and critical."""
        for error in (InvalidByteError(0x00), TruncatedError("READ_TRACK", 10),
                      MarkMismatchError("data epilog", 0xEB, 0xFF)):
            assert is_fatal_error(error)
            assert get_error_severity(error) == "critical"

    def test_image_errors(self):
        """Test image errors have error severity."""
        assert get_error_severity(ImageWriteError("Cannot write")) == "error"
        assert get_error_severity(OSError("disk full")) == "error"

    def test_unknown_errors_are_critical(self):
        """Test unexpected exceptions are critical."""
        assert is_fatal_error(RuntimeError("boom"))
        assert get_error_severity(RuntimeError("boom")) == "critical"

    def test_handle_conversion_error_adds_hint(self):
        """Test user-facing messages carry a hint."""
        message = handle_conversion_error(ImageCorruptError("NIB image has wrong size"))
        assert message == ("conversion failed: NIB image has wrong size. "
                           "Check the file is a 35-track image.")

    def test_handle_conversion_error_operation(self):
        """Test the operation name leads the message."""
        message = handle_conversion_error(TruncatedError("PROCESS_DATA", 400, 2, 3), "nib2dsk")
        assert message.startswith("nib2dsk failed: Unexpected end of track data")
        assert message.endswith("The nibble stream ends inside a sector.")

    def test_handle_format_error(self):
        """Test wrong-format inputs get a format hint."""
        error = ImageFormatError("Input is not a DSK image", detected_format="NIB")
        assert handle_conversion_error(error, "dsk2nib") == (
            "dsk2nib failed: Input is not a DSK image [Detected: NIB]. "
            "Check the input is the right kind of image.")

    def test_handle_unknown_error(self):
        """Test errors without a hint."""
        assert handle_conversion_error(RuntimeError("boom")) == "conversion failed: boom."


class TestLoggingHelpers:
    """Test logging setup and helpers."""

    def test_log_helpers(self, caplog):
        """Test operation, error and performance messages."""
        with caplog.at_level(logging.INFO):
            log_operation("dsk2nib", "a.dsk => a.nib [Volume:254]")
            log_error("nib2dsk", TruncatedError("READ_SECTOR", 56, 0))
            log_performance("decode", 0.5, tracks=35)

        assert "dsk2nib: a.dsk => a.nib [Volume:254]" in caplog.text
        assert "nib2dsk failed - TruncatedError" in caplog.text
        assert "Performance - decode: 0.50s, tracks=35" in caplog.text

    def test_setup_logging_file(self, tmp_path):
        """Test file logging writes DEBUG records."""
        log_file = tmp_path / "logs" / "convert.log"
        setup_logging(str(log_file))
        logging.getLogger("nib_converter.test").debug("V:fe T:00 S:00 C:fe")

        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "V:fe T:00 S:00 C:fe" in log_file.read_text()

    def test_setup_logging_replaces_handlers(self, tmp_path):
        """Test calling setup twice does not stack handlers."""
        setup_logging()
        count = len(logging.getLogger().handlers)
        setup_logging()
        assert len(logging.getLogger().handlers) == count
