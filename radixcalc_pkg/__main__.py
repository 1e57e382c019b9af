"""Main entry point for running radixcalc_pkg as a module.

This allows running RadixCalc with:
    python -m radixcalc_pkg
    python -m radixcalc_pkg --health-check
    python -m radixcalc_pkg -e "FF + 1" --base hex

This is equivalent to running:
    python -m radixcalc_pkg.cli
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
