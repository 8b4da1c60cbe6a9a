"""Allow running the converter as ``python -m nib_converter``."""

import sys

from nib_converter.main import main


if __name__ == "__main__":
    sys.exit(main())
