#!/usr/bin/env python
"""
Entry point that delegates to note_page_cli.cli.
"""
from __future__ import annotations

from note_page_cli.cli import main


if __name__ == "__main__":
    main()
