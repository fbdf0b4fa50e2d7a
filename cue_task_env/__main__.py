from __future__ import annotations

import logging
import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    If this module is executed as a script (``python cue_task_env/__main__.py``),
    the package may not be discoverable by Python. This helper inserts the
    parent directory of the package into ``sys.path`` so that imports resolve
    correctly.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root = pkg_dir.parent
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # Works when executed as a module: python -m cue_task_env
    from .demo import run  # type: ignore[attr-defined]
    from .task_core import parse_seed  # type: ignore[attr-defined]
except ImportError:
    # Works when executed as a script (absolute path, IDE "Run Python File", etc.)
    _ensure_repo_root_on_path()
    from cue_task_env.demo import run  # type: ignore[attr-defined]
    from cue_task_env.task_core import parse_seed  # type: ignore[attr-defined]


def main(argv: list[str] | None = None) -> int:
    """Run one scripted headless episode per task variant."""
    args = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    seed = parse_seed(args[0] if args else None)
    return run(seed=seed)


if __name__ == "__main__":
    raise SystemExit(main())
