"""Allow running as python -m secposture."""

import sys

from secposture.cli import main

sys.exit(main())
