"""Allow running as `python -m kaktus_monitor`."""

from __future__ import annotations

import sys

from .cli import main

sys.exit(main())
