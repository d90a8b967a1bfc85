"""Run the `spcrud` CLI from a source checkout: `python main.py lists`.

An editable install provides the `spcrud` script instead; this shim only puts
`src/` on the import path first.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def main() -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))
    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
