#!/usr/bin/env python3
"""
Packaging for the Apple II NIB converter.

Install with pip install -e . (add [test] for the test suite).
"""

from setuptools import setup, find_packages

setup(
    name="apple2-nib-converter",
    version="1.1.0",
    description="Apple II DSK to NIB and NIB to DSK disk image converter",
    author="Joshua Yewman",
    author_email="joshua@yewman.co.uk",
    license="MIT",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.5.0",
        "rich>=13.7.0",
        "numpy>=1.26.0",
    ],
    extras_require={
        "test": ["pytest>=7.4.0"],
    },
    entry_points={
        "console_scripts": [
            "dsk2nib=nib_converter.main:dsk2nib_main",
            "nib2dsk=nib_converter.main:nib2dsk_main",
        ],
    },
)
