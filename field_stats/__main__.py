"""Module entry point: python -m field_stats ..."""

from __future__ import annotations

from field_stats.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
