"""
Cross-platform file system utilities for vulkankit.

This module provides the file operations the installer and the cache store
depend on:
- Archive extraction (zip, tar.gz, tar.xz) with directory traversal checks
- Safe file operations (atomic writes, safe deletion)
- Directory tree copy with an explicit symlink and collision policy
"""

import logging
import lzma
import os
import shutil
import stat
import sys
import tarfile
import tempfile
import zipfile
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Optional, Union

from vulkankit.core.exceptions import (
    ArchiveExtractionError,
    FilesystemError,
    InsecureArchiveError,
    UnsupportedArchiveFormat,
)

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/home/user/vulkan-sdk/bin"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


# ============================================================================
# Archive Extraction
# ============================================================================

_TAR_MODES = {".tar.gz": "r:gz", ".tgz": "r:gz", ".tar.xz": "r:xz"}


def _tar_mode(archive_name: str) -> Optional[str]:
    for suffix, mode in _TAR_MODES.items():
        if archive_name.endswith(suffix):
            return mode
    return None


def _check_members(names: Iterable[str], destination: Path) -> None:
    """Reject member names that would land outside destination."""
    root = destination.resolve()
    for name in names:
        if not is_relative_to((root / name).resolve(), root):
            raise InsecureArchiveError(f"Archive member escapes {destination}: {name}")


def extract_archive(archive_path: Union[str, Path], destination: Union[str, Path]) -> Path:
    """
    Extract an SDK, runtime or cache archive into destination.

    Linux SDKs are .tar.gz or .tar.xz, the Windows runtime and newer macOS
    SDKs are .zip. Every member is on disk when this returns.

    Raises:
        UnsupportedArchiveFormat: For .dmg, .exe and other extensions
        InsecureArchiveError: If a member would escape destination
        ArchiveExtractionError: If the archive is missing or unreadable
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.is_file():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    name = archive_path.name.lower()
    tar_mode = _tar_mode(name)
    if tar_mode is None and not name.endswith(".zip"):
        raise UnsupportedArchiveFormat(
            f"Unsupported archive format: {archive_path.name}. "
            "Supported: .zip, .tar.gz, .tar.xz"
        )

    destination.mkdir(parents=True, exist_ok=True)
    try:
        if tar_mode is None:
            with zipfile.ZipFile(archive_path) as zf:
                _check_members(zf.namelist(), destination)
                zf.extractall(destination)
        else:
            with tarfile.open(archive_path, tar_mode) as tar:
                _check_members(tar.getnames(), destination)
                if sys.version_info >= (3, 12):
                    tar.extractall(destination, filter="data")
                else:
                    tar.extractall(destination)
    except (
        OSError, EOFError, lzma.LZMAError, zlib.error, tarfile.TarError, zipfile.BadZipFile
    ) as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e

    return destination


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(file_path: Union[str, Path], content: str, encoding: str = "utf-8") -> None:
    """Replace file_path with content; readers see the old or the new file, never a partial one."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    try:
        with open(fd, "w", encoding=encoding) as f:
            f.write(content)
        os.replace(temp_name, file_path)
    except OSError:
        Path(temp_name).unlink(missing_ok=True)
        raise


def _clear_readonly(func, failed_path, _exc) -> None:
    # Files written by the Windows SDK installer can be read-only
    os.chmod(failed_path, stat.S_IWRITE)
    func(failed_path)


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Remove a directory tree; a missing path is not an error.

    Raises:
        ValueError: If require_prefix is given and path is not under it
        FilesystemError: If path is a file or removal fails
    """
    path = Path(path).resolve()

    if require_prefix is not None and not is_relative_to(
        path, Path(require_prefix).resolve()
    ):
        raise ValueError(f"Refusing to delete '{path}': not under '{require_prefix}'")

    if not path.exists():
        return
    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    handler = _clear_readonly if IS_WINDOWS else None
    try:
        if sys.version_info >= (3, 12):
            shutil.rmtree(path, onexc=handler)
        else:
            shutil.rmtree(path, onerror=handler)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def copy_tree(source: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Recursively copy the contents of a directory into another directory.

    Policy:
    - directories are merged with existing directories at the destination
    - files overwrite files of the same name
    - symlinks are recreated as symlinks and never followed

    Args:
        source: Source directory
        destination: Destination directory (created if missing)

    Raises:
        FilesystemError: If source is missing or not a directory

    Example:
        >>> copy_tree('/tmp/vulkan-runtime/VulkanRT-1.3.250.1-Components', 'C:/VulkanSDK/1.3.250.1/runtime')
    """
    source = Path(source)
    destination = Path(destination)

    if not source.is_dir():
        raise FilesystemError(f"Source is not a directory: {source}")

    destination.mkdir(parents=True, exist_ok=True)

    for item in source.iterdir():
        dest_item = destination / item.name

        if item.is_symlink():
            if dest_item.is_symlink() or dest_item.is_file():
                dest_item.unlink()
            elif dest_item.is_dir():
                safe_rmtree(dest_item)
            os.symlink(os.readlink(item), dest_item)
        elif item.is_dir():
            if dest_item.is_symlink() or dest_item.is_file():
                dest_item.unlink()
            copy_tree(item, dest_item)
        else:
            if dest_item.is_symlink():
                dest_item.unlink()
            elif dest_item.is_dir():
                safe_rmtree(dest_item)
            shutil.copy2(item, dest_item)


def remove_folder_if_exists(folder: Union[str, Path]) -> bool:
    """
    Remove one folder, if it exists.

    Args:
        folder: Folder to remove

    Returns:
        True if the folder was deleted, False if it did not exist or could not
        be removed
    """
    folder = Path(folder)
    if not folder.exists():
        logger.info(f"Folder {folder} doesn't exist.")
        return False

    try:
        safe_rmtree(folder)
    except FilesystemError as e:
        logger.warning(f"Error removing folder: {e}")
        return False

    logger.info(f"Deleted folder: {folder}")
    return True


def delete_files_in_folder(folder: Union[str, Path]) -> list:
    """
    Delete regular files directly inside a folder, keeping subfolders.

    Args:
        folder: Folder to clean

    Returns:
        List of deleted file paths
    """
    deleted = []
    for entry in Path(folder).iterdir():
        if entry.is_dir() and not entry.is_symlink():
            continue
        entry.unlink()
        logger.info(f"Deleted file: {entry}")
        deleted.append(entry)
    return deleted


# ============================================================================
# Temporary File/Directory Management
# ============================================================================


@contextmanager
def temporary_directory(
    prefix: str = "vulkankit_",
    parent: Optional[Union[str, Path]] = None,
    cleanup: bool = True,
):
    """
    Context manager for temporary directory with automatic cleanup.

    Args:
        prefix: Prefix for temp directory name
        parent: Directory to create the temp directory in (system default if None)
        cleanup: If True, remove directory on exit

    Yields:
        Path to temporary directory
    """
    if parent is not None:
        Path(parent).mkdir(parents=True, exist_ok=True)
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix, dir=parent))

    try:
        yield temp_dir
    finally:
        if cleanup and temp_dir.exists():
            safe_rmtree(temp_dir)


__all__ = [
    "is_relative_to",
    "extract_archive",
    "atomic_write",
    "safe_rmtree",
    "copy_tree",
    "remove_folder_if_exists",
    "delete_files_in_folder",
    "temporary_directory",
]
