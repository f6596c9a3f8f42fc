"""Request handling for the file viewer.

A request path resolves to a directory view or a file view. Failures
of the filesystem, and unsafe paths, become the error view instead of
propagating.
"""

import errno
import logging
import os
from pathlib import Path
from typing import Any, final

from django.conf import settings

from server.apps.viewer.exceptions import InvalidPathError
from server.apps.viewer.infrastructure.cached_fs import CachedFileSystem
from server.apps.viewer.infrastructure.metadata import build_stats
from server.apps.viewer.logic.listing_operations import (
    build_file_rows,
    list_children,
)
from server.apps.viewer.logic.navigation_operations import (
    NavigationContext,
    NavigationResolver,
)
from server.apps.viewer.path_mapper import PathMapper

logger = logging.getLogger(__name__)

_OS_ERROR_FIELDS = ('errno', 'strerror', 'filename', 'filename2')


def error_fields(error: BaseException) -> dict[str, Any]:
    """Copy the public fields of an exception.

    Args:
        error: Exception raised while handling a request.

    Returns:
        Shallow copy of the exception attributes. OS errors also carry
        errno, its symbolic code, strerror and the filenames involved.
    """
    fields = {
        name: value
        for name, value in vars(error).items()
        if not name.startswith('_')
    }

    if isinstance(error, OSError):
        for name in _OS_ERROR_FIELDS:
            value = getattr(error, name)
            if value is not None:
                fields[name] = value
        if error.errno is not None:
            fields['code'] = errno.errorcode.get(error.errno, '')

    return fields


def error_response(error: BaseException) -> dict[str, Any]:
    """Build the error view body.

    Args:
        error: Exception to report.

    Returns:
        Body with the error fields and a guaranteed ``message``.
    """
    return {
        'error': {
            **error_fields(error),
            'message': str(error),
        },
    }


@final
class FileBrowser:
    """Serves directory and file views below a fixed root directory."""

    def __init__(
        self,
        root_directory: str | Path,
        file_system: CachedFileSystem | None = None,
    ) -> None:
        """Initialize browser.

        Args:
            root_directory: Directory served as ``/``.
            file_system: Cached filesystem, a fresh one by default.
        """
        self.path_mapper = PathMapper(root_directory)
        self.file_system = file_system or CachedFileSystem()
        self.resolver = NavigationResolver(self.file_system, self.path_mapper)

    async def browse(
        self,
        request_path: str,
        query: str | None = None,
        query_dir: str = '',
    ) -> dict[str, Any]:
        """Handle a view request.

        Args:
            request_path: Path relative to the served root.
            query: Optional search substring.
            query_dir: Search root for file views, relative to the root.

        Returns:
            Directory view, file view or error view body.
        """
        try:
            fs_path = self.path_mapper.to_fs_path(request_path)
            file_stat = await self.file_system.stat(fs_path)
        except InvalidPathError as error:
            logger.warning('Invalid path rejected: %s', request_path)
            return error_response(error)
        except OSError as error:
            logger.info('Cannot stat %s: %s', request_path, error)
            return error_response(error)
        except Exception:
            logger.exception('Unexpected failure reading %s', request_path)
            raise

        try:
            if file_stat.is_directory:
                children = await list_children(
                    self.resolver,
                    self.file_system,
                    fs_path,
                    query,
                )
                rows = await build_file_rows(
                    self.file_system,
                    self.path_mapper,
                    fs_path,
                    request_path,
                    children,
                    query,
                )
                return {
                    'files': [row.to_dict() for row in rows],
                    'stats': build_stats(file_stat, child_files=children),
                }

            post = await self.resolver.resolve_post(
                fs_path,
                NavigationContext(
                    display_name=request_path.strip('/'),
                    query=query,
                    query_root_dir=query_dir,
                ),
            )
        except (InvalidPathError, OSError) as error:
            logger.info('Failed to browse %s: %s', request_path, error)
            return error_response(error)
        except Exception:
            logger.exception('Unexpected failure browsing %s', request_path)
            raise

        return {
            'post': post.to_dict(),
            'stats': build_stats(file_stat, content=post.content),
        }


_browser: FileBrowser | None = None


def configure_browser(root_directory: str | Path) -> FileBrowser:
    """Replace the process-wide browser with one for root_directory.

    Args:
        root_directory: Directory served as ``/``.

    Returns:
        The new browser, with empty caches.
    """
    global _browser  # noqa: PLW0603
    _browser = FileBrowser(root_directory)
    logger.info('Serving files from %s', root_directory)
    return _browser


def get_browser() -> FileBrowser:
    """Get the process-wide browser, building it from settings.

    An empty ``VIEWER_ROOT_DIR`` serves the working directory.

    Returns:
        FileBrowser rooted at ``VIEWER_ROOT_DIR`` unless configured.
    """
    if _browser is None:
        return configure_browser(
            getattr(settings, 'VIEWER_ROOT_DIR', '') or os.getcwd(),
        )
    return _browser
