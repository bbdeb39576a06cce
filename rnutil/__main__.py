"""
Entry point for running rnutil as a module: python -m rnutil
"""

import sys
from .cli import main

if __name__ == "__main__":
    sys.exit(main())
