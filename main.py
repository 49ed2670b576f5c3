#!/usr/bin/env python3
"""
Entry point for genetic algorithm inputs selection.
This file delegates to the implementation in src/.
"""

import sys
import os

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from main import main

if __name__ == "__main__":
    sys.exit(main())
