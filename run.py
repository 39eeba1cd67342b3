"""
Quick launcher for livespectrum from a source checkout.
"""

import sys
from pathlib import Path

# Add the src directory to the path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from livespectrum.main import main

if __name__ == "__main__":
    sys.exit(main())
