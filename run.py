#!/usr/bin/env python3
"""
Run script for Activity Timer.

This script provides a convenient way to start the Activity Timer
from the command line with proper Python path setup.
"""

import os
import sys
from pathlib import Path


def setup_environment():
    """Set up the Python path to include the src directory."""
    src_path = Path(__file__).parent / "src"
    sys.path.insert(0, str(src_path.absolute()))

    # Data and logs are relative to the project root
    os.chdir(Path(__file__).parent)


if __name__ == "__main__":
    setup_environment()

    from activity_timer.main import main

    main()
