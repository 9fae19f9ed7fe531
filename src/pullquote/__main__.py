"""Allow ``python -m pullquote``."""

from pullquote.cli import main

raise SystemExit(main())
