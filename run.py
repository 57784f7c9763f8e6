#!/usr/bin/env python3
"""Executable script to run the geiger display pipeline.

This is a development wrapper for the installed package.
For production use, install the package and use the 'geiger-display' command instead.
"""

import sys
from pathlib import Path

# Add src directory to Python path for development mode
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from geiger_display.main import main

if __name__ == "__main__":
    sys.exit(main())
