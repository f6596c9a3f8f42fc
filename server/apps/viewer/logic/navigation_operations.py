"""Sibling resolution and prev/next navigation for file views.

Two sibling lists exist. Without a query, siblings are the
non-directory entries of the file's parent directory in the order the
filesystem lists them; they are never sorted. With a query, siblings
are every file below the query root whose relative path or content
contains the query, ignoring case.
"""

import asyncio
import logging
import os
from dataclasses import asdict, dataclass
from typing import final

from django.utils.http import urlencode

from server.apps.viewer.infrastructure.cached_fs import (
    CachedFileSystem,
    MemoTable,
)
from server.apps.viewer.path_mapper import PathMapper

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class NavigationContext:
    """Where a file view was requested from.

    ``display_name`` is the request path of the file relative to the
    served root. ``query_root_dir`` is relative to the served root too;
    empty means the root itself.
    """

    display_name: str
    query: str | None = None
    query_root_dir: str | None = None


@final
@dataclass(frozen=True, slots=True)
class Post:
    """File content with links to its neighbours."""

    content: str
    prev: str | None = None
    next: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return asdict(self)


def query_string(query: str, query_root_dir: str) -> str:
    """Build the query suffix that keeps navigation inside search results.

    Args:
        query: Search substring.
        query_root_dir: Search root relative to the served root.

    Returns:
        Query string starting with ``?``.
    """
    return '?' + urlencode({'query': query, 'query_dir': query_root_dir})


def neighbours(
    entries: list[str],
    target: str,
) -> tuple[str | None, str | None]:
    """Find the entries around target.

    Args:
        entries: Ordered sibling list.
        target: Entry to look up by exact equality.

    Returns:
        Tuple of (previous, next); both None when target is missing.
    """
    try:
        index = entries.index(target)
    except ValueError:
        return None, None

    prev_entry = entries[index - 1] if index > 0 else None
    next_entry = entries[index + 1] if index + 1 < len(entries) else None
    return prev_entry, next_entry


@final
class NavigationResolver:
    """Computes sibling lists and prev/next links over a cached filesystem.

    Filesystem errors propagate to the caller unchanged.
    """

    def __init__(
        self,
        file_system: CachedFileSystem,
        path_mapper: PathMapper,
    ) -> None:
        """Initialize resolver.

        Args:
            file_system: Cached filesystem to read from.
            path_mapper: Mapper for the served root directory.
        """
        self._file_system = file_system
        self._path_mapper = path_mapper
        self._posts: MemoTable[
            tuple[str, NavigationContext],
            Post,
        ] = MemoTable('post')

    async def sibling_files(self, file_path: str) -> list[str]:
        """List non-directory entries next to a file.

        Args:
            file_path: Absolute path of the file.

        Returns:
            Base names in directory listing order.
        """
        parent_directory = os.path.dirname(file_path)
        names = await self._file_system.listdir(parent_directory)
        stats = await asyncio.gather(*(
            self._file_system.stat(os.path.join(parent_directory, name))
            for name in names
        ))
        return [
            name
            for name, file_stat in zip(names, stats, strict=True)
            if not file_stat.is_directory
        ]

    async def collect_files(self, directory: str) -> list[str]:
        """Walk a directory tree.

        A directory's own entries come first, followed by the full
        contents of each subdirectory in listing order.

        Args:
            directory: Absolute directory path.

        Returns:
            Absolute paths of every file and directory below directory.
        """
        entries = [
            os.path.join(directory, name)
            for name in await self._file_system.listdir(directory)
        ]
        stats = await asyncio.gather(*(
            self._file_system.stat(entry) for entry in entries
        ))

        collected = list(entries)
        for entry, file_stat in zip(entries, stats, strict=True):
            if file_stat.is_directory:
                collected.extend(await self.collect_files(entry))
        return collected

    async def find_matching_files(
        self,
        search_root: str,
        query: str,
    ) -> list[str]:
        """Find files whose relative path or content contains query.

        Comparison ignores case. Directories never match.

        Args:
            search_root: Absolute directory to search below.
            query: Substring to look for.

        Returns:
            Paths relative to search_root, in walk order.
        """
        candidates = await self.collect_files(search_root)
        stats = await asyncio.gather(*(
            self._file_system.stat(candidate) for candidate in candidates
        ))
        files = [
            candidate
            for candidate, file_stat in zip(candidates, stats, strict=True)
            if not file_stat.is_directory
        ]
        contents = await asyncio.gather(*(
            self._file_system.read_text(file_path) for file_path in files
        ))
        names = [
            self._path_mapper.to_relative_path(file_path, search_root)
            for file_path in files
        ]

        needle = query.lower()
        matches = [
            name
            for name, content in zip(names, contents, strict=True)
            if needle in name.lower() or needle in content.lower()
        ]
        logger.debug(
            'Query %r matched %d of %d files under %s',
            query,
            len(matches),
            len(files),
            search_root,
        )
        return matches

    async def resolve_post(
        self,
        file_path: str,
        context: NavigationContext,
    ) -> Post:
        """Read a file and link it to its neighbours.

        Args:
            file_path: Absolute path of the file.
            context: Request path and optional search parameters.

        Returns:
            Post with content and prev/next links.
        """
        return await self._posts.get_or_compute(
            (file_path, context),
            lambda: self._build_post(file_path, context),
        )

    async def _build_post(
        self,
        file_path: str,
        context: NavigationContext,
    ) -> Post:
        if context.query:
            query_root_dir = (context.query_root_dir or '').strip('/')
            search_root = self._path_mapper.to_fs_path(query_root_dir)
            siblings = await self.find_matching_files(
                search_root,
                context.query,
            )
            # Results are relative to the query root, the display name to
            # the served root; they only line up when both are the same.
            target = context.display_name
            link_parent = ''
            suffix = query_string(context.query, query_root_dir)
        else:
            siblings = await self.sibling_files(file_path)
            target = self._path_mapper.get_name(context.display_name)
            link_parent = self._path_mapper.get_parent_path(
                context.display_name,
            )
            suffix = ''

        prev_entry, next_entry = neighbours(siblings, target)

        return Post(
            content=await self._file_system.read_text(file_path),
            prev=self._link(link_parent, prev_entry, suffix),
            next=self._link(link_parent, next_entry, suffix),
        )

    def _link(
        self,
        parent: str,
        entry: str | None,
        suffix: str,
    ) -> str | None:
        if not entry:
            return None
        return self._path_mapper.join_paths(parent, entry) + suffix
