"""Path translation between request paths and filesystem paths.

Request paths are what clients see: /docs/notes.md
Filesystem paths live under the served root: /srv/files/docs/notes.md
"""

import os
import posixpath
from pathlib import Path
from typing import Final, final

from server.apps.viewer.exceptions import InvalidPathError

# Character used to split request paths
_PATH_SEPARATOR: Final = '/'

_PARENT_SEGMENT: Final = '..'


@final
class PathMapper:
    """Translates between request paths and paths under the root directory.

    The root directory is fixed when the mapper is built; nothing here
    touches the filesystem.
    """

    def __init__(self, root_directory: str | Path) -> None:
        """Initialize path mapper with the served root.

        Args:
            root_directory: Absolute directory served as ``/``.
        """
        self._root_directory = str(root_directory)

    @property
    def root_directory(self) -> str:
        """Get the served root directory."""
        return self._root_directory

    def to_fs_path(self, request_path: str) -> str:
        """Convert request path to filesystem path.

        Args:
            request_path: Client-visible path (e.g., /docs/a.txt).

        Returns:
            Path under the root directory (e.g., /srv/files/docs/a.txt).

        Raises:
            InvalidPathError: If the path could escape the root.
        """
        self.ensure_valid(request_path)

        normalized = request_path.strip(_PATH_SEPARATOR)

        # Handle root path
        if not normalized:
            return self._root_directory

        return str(Path(self._root_directory) / normalized)

    def to_relative_path(self, fs_path: str, base_directory: str) -> str:
        """Express a filesystem path relative to a directory.

        Args:
            fs_path: Path at or below ``base_directory``.
            base_directory: Directory to strip from the front.

        Returns:
            Relative path using ``/`` separators, without leading slash.

        Raises:
            ValueError: If fs_path is not below base_directory.
        """
        if fs_path == base_directory:
            return ''

        prefix = base_directory.rstrip(os.sep) + os.sep
        if not fs_path.startswith(prefix):
            raise ValueError(f'{fs_path} is not below {base_directory}')

        return Path(fs_path.removeprefix(prefix)).as_posix()

    def get_parent_path(self, request_path: str) -> str:
        """Get parent directory of a request path.

        Args:
            request_path: Request path (e.g., docs/reports/file.pdf).

        Returns:
            Parent path without leading slash (e.g., docs/reports).
            Returns empty string for root-level items.
        """
        normalized = request_path.strip(_PATH_SEPARATOR)

        if _PATH_SEPARATOR not in normalized:
            return ''

        return normalized.rsplit(_PATH_SEPARATOR, 1)[0]

    def get_name(self, request_path: str) -> str:
        """Get filename or folder name from request path.

        Args:
            request_path: Request path (e.g., /documents/file.pdf).

        Returns:
            Name component (e.g., file.pdf).
            Returns empty string for root path.
        """
        normalized = request_path.strip(_PATH_SEPARATOR)

        if _PATH_SEPARATOR in normalized:
            return normalized.rsplit(_PATH_SEPARATOR, 1)[1]

        return normalized

    def join_paths(self, parent: str, name: str) -> str:
        """Join parent path and name into an absolute request path.

        Args:
            parent: Parent request path (e.g., /documents or empty).
            name: Name or relative path to append (e.g., file.pdf).

        Returns:
            Joined path (e.g., /documents/file.pdf).
        """
        joined = posixpath.join(
            parent.strip(_PATH_SEPARATOR),
            name.strip(_PATH_SEPARATOR),
        )
        return _PATH_SEPARATOR + joined.strip(_PATH_SEPARATOR)

    def validate_path(self, request_path: str) -> bool:
        """Validate request path for security.

        Checks for path traversal attacks and invalid characters.

        Args:
            request_path: Request path to validate.

        Returns:
            True if path is valid and safe.
        """
        # Check for path traversal attempts
        segments = request_path.replace('\\', _PATH_SEPARATOR).split(
            _PATH_SEPARATOR,
        )
        if _PARENT_SEGMENT in segments:
            return False

        # Check for null bytes
        return '\x00' not in request_path

    def ensure_valid(self, request_path: str) -> None:
        """Raise if the request path fails validation.

        Args:
            request_path: Request path to validate.

        Raises:
            InvalidPathError: If the path is unsafe.
        """
        if not self.validate_path(request_path):
            raise InvalidPathError(request_path)
