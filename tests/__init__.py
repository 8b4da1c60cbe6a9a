"""
Test suite for the Apple II NIB converter.

This package contains:
- Unit tests for the codec components, settings and image I/O
- Integration tests for complete DSK <-> NIB conversions
- Fixtures for building logical images and nibble streams
"""
