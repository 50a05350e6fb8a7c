"""Build the Participa static site from a checkout. See scripts/site_builder.py."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "scripts"))

from site_builder import main

if __name__ == "__main__":
    sys.exit(main())
