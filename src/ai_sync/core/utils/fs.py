"""Asynchronous filesystem helpers.

Blocking ``pathlib`` calls are pushed to a worker thread so that manifest
reads and include-target reads are the only suspension points of the
composition pipeline.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


async def read_text(path: PathLike, encoding: str = "utf-8") -> str:
    """Read a whole text file without blocking the event loop.

    Raises:
        FileNotFoundError: If the file does not exist.
        OSError: For any other read failure.
    """
    return await asyncio.to_thread(Path(path).read_text, encoding=encoding)


async def file_exists(path: PathLike) -> bool:
    """Return True if ``path`` exists and is a regular file."""
    return await asyncio.to_thread(Path(path).is_file)


async def dir_exists(path: PathLike) -> bool:
    """Return True if ``path`` exists and is a directory."""
    return await asyncio.to_thread(Path(path).is_dir)


__all__ = ["read_text", "file_exists", "dir_exists"]
