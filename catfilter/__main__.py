"""
Module entrypoint for the catfilter CLI.

This file exists so that `python -m catfilter ...` works consistently in all
environments, including when the console-script wrapper is not installed.
"""

from __future__ import annotations

from catfilter.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
