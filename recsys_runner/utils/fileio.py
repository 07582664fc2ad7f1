"""
File output primitive used by the result writer.

Writes go through ``write_string`` so the job never touches ``open()``
directly and tests can patch a single seam.
"""

from __future__ import annotations

from pathlib import Path


def write_string(path: str | Path, data: str) -> Path:
    """Write ``data`` to ``path`` as UTF-8 in a single call.

    Parent directories are created if missing; an existing file is replaced.

    Args:
        path: Destination file path.
        data: Full text content to write.

    Returns:
        ``path`` as written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data, encoding="utf-8", newline="")
    return path
