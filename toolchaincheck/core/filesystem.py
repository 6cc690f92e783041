"""
File system utilities for ToolchainCheck.

Search path enumeration, executable lookup, tolerant text reads and
atomic writes. All lookups treat I/O errors as "not there".
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


def search_path_directories(path_env: Optional[str] = None) -> List[Path]:
    """
    Enumerate the directories on the executable search path.

    Args:
        path_env: PATH-style string. Defaults to the PATH environment variable.

    Returns:
        Directories in search order, empty entries removed, duplicates kept
        only once (first occurrence wins)
    """
    if path_env is None:
        path_env = os.environ.get("PATH", "")

    directories: List[Path] = []
    seen = set()
    for entry in path_env.split(os.pathsep):
        entry = entry.strip().strip('"')
        if not entry:
            continue
        key = os.path.normcase(os.path.normpath(entry))
        if key in seen:
            continue
        seen.add(key)
        directories.append(Path(entry))
    return directories


def file_exists(path: Union[str, Path]) -> bool:
    """
    Check whether a regular file exists, treating I/O errors as absence.

    Args:
        path: Path to check

    Returns:
        True if ``path`` is an existing file
    """
    try:
        return Path(path).is_file()
    except OSError as e:
        logger.debug(f"Could not stat {path}: {e}")
        return False


def find_executable(
    name: str,
    search_paths: Optional[List[Path]] = None,
    suffix: Optional[str] = None,
) -> Optional[Path]:
    """
    Find an executable in the system PATH or provided search paths.

    Args:
        name: Executable name without suffix (e.g., 'gcc')
        search_paths: Optional list of directories to search
        suffix: Executable suffix to try in addition to the bare name
            (defaults to '.exe' on Windows)

    Returns:
        Path to the first match, None if not found

    Example:
        >>> find_executable('gcc')
        PosixPath('/usr/bin/gcc')
    """
    if suffix is None:
        suffix = ".exe" if IS_WINDOWS else ""

    names = [name]
    if suffix and not name.lower().endswith(suffix.lower()):
        names.insert(0, f"{name}{suffix}")

    if search_paths is None:
        search_paths = search_path_directories()

    for directory in search_paths:
        for candidate_name in names:
            exe_path = directory / candidate_name
            if file_exists(exe_path):
                return exe_path

    return None


def read_text_lines(path: Union[str, Path], encoding: str = "utf-8") -> Optional[List[str]]:
    """
    Read a text file into lines, returning None if it cannot be read.

    Undecodable bytes are replaced rather than raising.
    """
    try:
        with open(path, "r", encoding=encoding, errors="replace") as f:
            return f.read().splitlines()
    except OSError as e:
        logger.debug(f"Could not read {path}: {e}")
        return None


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    The file is never left partially written. If the write fails, the
    original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


__all__ = [
    "search_path_directories",
    "file_exists",
    "find_executable",
    "read_text_lines",
    "atomic_write",
]
