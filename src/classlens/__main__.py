"""Allow ``python -m classlens``."""

from .app import main

raise SystemExit(main())
