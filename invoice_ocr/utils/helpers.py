"""
Helper Utilities Module.

Small file-system helpers shared by the input handler and the CLI.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - collect_files: List supported files under a directory
"""

from pathlib import Path
from typing import Iterable, List, Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("outputs/reports")
        PosixPath('outputs/reports')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the lowercase file extension, including the dot.

    Example:
        >>> get_file_extension("document.PDF")
        ".pdf"
        >>> get_file_extension("noextension")
        ""
    """
    return Path(filepath).suffix.lower()


def collect_files(
    directory: Union[str, Path],
    extensions: Iterable[str],
    recursive: bool = False
) -> List[Path]:
    """
    Collect files with the given extensions from a directory.

    Extension matching is case-insensitive. Results are sorted and
    de-duplicated.

    Args:
        directory: Directory to search.
        extensions: Extensions including the dot (e.g. ".pdf").
        recursive: Whether to search subdirectories.

    Returns:
        Sorted list of matching file paths.
    """
    wanted = {ext.lower() for ext in extensions}
    pattern = "**/*" if recursive else "*"

    files = {
        path for path in Path(directory).glob(pattern)
        if path.is_file() and path.suffix.lower() in wanted
    }
    return sorted(files)
