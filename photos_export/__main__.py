"""Allow ``python -m photos_export``."""
import sys

from .cli import main

sys.exit(main())
