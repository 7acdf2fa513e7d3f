"""Module entrypoint for the metricscan CLI."""

from __future__ import annotations

from metricscan.cli.app import main

if __name__ == "__main__":
    main()
