"""javasee/__main__.py – ``python -m javasee``."""

from .main import main

raise SystemExit(main())
