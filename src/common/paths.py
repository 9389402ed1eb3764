"""Common path utilities.

Experiments, Stan programs and config files live at the repository root,
while the code may be imported from an installed copy. These helpers locate
the repository root reliably regardless of the working directory.
"""

from __future__ import annotations

from pathlib import Path


def find_repo_root(start: Path) -> Path:
    """Find the enclosing repository root.

    Strategy: walk upward from `start` until we find a directory that looks
    like the repo root (must contain `stan_models/` and `config/`).

    Returns `start` if no such parent exists.
    """
    start = start.resolve()
    for candidate in (start, *start.parents):
        if (candidate / "stan_models").is_dir() and (candidate / "config").is_dir():
            return candidate
    return start
