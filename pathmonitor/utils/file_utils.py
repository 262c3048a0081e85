"""
Path utilities for pathmonitor
"""
import os
from pathlib import Path
from typing import Iterator, Union
import logging

logger = logging.getLogger(__name__)


def normalize_path(path: Union[str, Path]) -> Path:
    """
    Normalize path to the absolute form used as a registry key

    Args:
        path: Path to normalize

    Returns:
        Absolute Path with ``~``, ``.`` and ``..`` collapsed
    """
    path_str = os.path.expanduser(str(path))
    # normpath rather than resolve(): symlinks stay as the caller named them
    return Path(os.path.normpath(os.path.abspath(path_str)))


def is_descendant(path: Path, ancestor: Path) -> bool:
    """True if ``path`` lies strictly below ``ancestor``"""
    return ancestor in path.parents


def iter_subdirectories(root: Union[str, Path]) -> Iterator[Path]:
    """
    Yield every directory that currently exists below root

    Symlinked directories are not followed. Unreadable directories are
    skipped with a warning.

    Args:
        root: Directory to enumerate

    Yields:
        Normalized descendant directory paths (root itself excluded)
    """
    root_path = normalize_path(root)
    if not root_path.is_dir():
        return

    def on_error(error: OSError):
        logger.warning(f"Cannot enumerate {error.filename}: {error.strerror}")

    for dir_path, dir_names, _ in os.walk(root_path, onerror=on_error, followlinks=False):
        for dir_name in dir_names:
            yield Path(dir_path) / dir_name
