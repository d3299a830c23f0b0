#!/usr/bin/env python3
"""
CreatorSync - Creator Post Archive Sync
=======================================

Main application entry point; see ``creatorsync --help``.

Usage:
    python main.py --help                    # Show all commands
    python main.py check-config              # Validate configuration
    python main.py sync-all                  # Sweep every target
"""

from creatorsync.cli import main

if __name__ == "__main__":
    main()
