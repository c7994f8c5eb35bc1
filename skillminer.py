#!/usr/bin/env python3
"""Skillminer CLI entry point.

This file allows running skillminer directly:
    python skillminer.py

For installed usage, use:
    skillminer
"""

import sys
from skillminer.cli import main

if __name__ == "__main__":
    sys.exit(main())
