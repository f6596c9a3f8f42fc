"""Business logic for directory listings."""

import asyncio
import logging
import os
import secrets
from dataclasses import dataclass
from typing import Final, final

from server.apps.viewer.infrastructure.cached_fs import CachedFileSystem
from server.apps.viewer.logic.navigation_operations import (
    NavigationResolver,
    query_string,
)
from server.apps.viewer.path_mapper import PathMapper

logger = logging.getLogger(__name__)

# Row ID length in bytes (generates 16 hex chars)
_ROW_ID_BYTES: Final = 8


@final
@dataclass(frozen=True, slots=True)
class FileRow:
    """One entry of a directory view."""

    href: str
    name: str
    id: str
    is_directory: bool

    def to_dict(self) -> dict[str, str | bool]:
        return {
            'href': self.href,
            'name': self.name,
            'id': self.id,
            'isDirectory': self.is_directory,
        }


def generate_row_id() -> str:
    """Generate an opaque unique ID for a listing row.

    Returns:
        Random hex token.
    """
    return secrets.token_hex(_ROW_ID_BYTES)


async def list_children(
    resolver: NavigationResolver,
    file_system: CachedFileSystem,
    directory: str,
    query: str | None = None,
) -> list[str]:
    """Get the names shown in a directory view.

    Args:
        resolver: Resolver used for query searches.
        file_system: Cached filesystem.
        directory: Absolute directory path.
        query: Optional search substring.

    Returns:
        Entry names, or relative paths of matching files when querying.
    """
    if query:
        return await resolver.find_matching_files(directory, query)
    return await file_system.listdir(directory)


async def build_file_rows(
    file_system: CachedFileSystem,
    path_mapper: PathMapper,
    directory: str,
    request_path: str,
    children: list[str],
    query: str | None = None,
) -> list[FileRow]:
    """Build listing rows for the children of a directory.

    Stats of every child are fetched concurrently. Any failure aborts
    the whole listing.

    Args:
        file_system: Cached filesystem.
        path_mapper: Mapper for the served root directory.
        directory: Absolute directory path.
        request_path: Request path of the directory.
        children: Names or relative paths below directory.
        query: Search substring carried into every href.

    Returns:
        Rows in the order of children.
    """
    stats = await asyncio.gather(*(
        file_system.stat(os.path.join(directory, child))
        for child in children
    ))

    logger.debug('Listing %d entries of %s', len(children), directory)

    suffix = ''
    if query:
        suffix = query_string(query, request_path.strip('/'))

    return [
        FileRow(
            href=path_mapper.join_paths(request_path, child) + suffix,
            name=child,
            id=generate_row_id(),
            is_directory=file_stat.is_directory,
        )
        for child, file_stat in zip(children, stats, strict=True)
    ]
