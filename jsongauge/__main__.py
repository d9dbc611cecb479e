"""CLI entry point for jsongauge."""

from jsongauge.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
