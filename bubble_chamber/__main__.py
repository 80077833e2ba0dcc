from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Put the repository root (parent of this package) on ``sys.path``.

    Running ``python bubble_chamber/__main__.py`` directly leaves the package
    itself undiscoverable; inserting its parent directory lets the absolute
    import below resolve.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root = str(pkg_dir.parent)
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


try:
    # python -m bubble_chamber
    from .app import run  # type: ignore[attr-defined]
except ImportError:
    # executed as a plain script
    _ensure_repo_root_on_path()
    from bubble_chamber.app import run  # type: ignore[attr-defined]


def main() -> int:
    """Console entry point."""
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
