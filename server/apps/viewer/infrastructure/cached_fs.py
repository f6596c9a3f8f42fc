"""Memoized filesystem access for the viewer.

The viewer treats the served directory tree as immutable for the
lifetime of the process. Every listing, read and stat is performed at
most once per path string and then answered from memory.

Cache keys are the exact path strings supplied by callers. Paths that
point at the same file but differ lexically (trailing separator, case,
symlinks) are separate entries.
"""

import asyncio
import logging
import os
import stat
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Generic, Protocol, TypeVar, final

logger = logging.getLogger(__name__)

# Version control metadata is never listed
EXCLUDED_ENTRY_NAMES: Final = frozenset(('.git',))

TEXT_ENCODING: Final = 'utf-8'

_KeyT = TypeVar('_KeyT', bound=Hashable)
_ValueT = TypeVar('_ValueT')


@final
@dataclass(frozen=True, slots=True)
class FileStat:
    """Subset of ``os.stat_result`` the viewer needs."""

    access_time: float
    modify_time: float
    change_time: float
    size_bytes: int
    is_directory: bool

    @classmethod
    def from_os_stat(cls, stat_result: os.stat_result) -> 'FileStat':
        """Build a FileStat from a raw stat result.

        Args:
            stat_result: Result of ``os.stat``.

        Returns:
            FileStat with timestamps in POSIX seconds.
        """
        return cls(
            access_time=stat_result.st_atime,
            modify_time=stat_result.st_mtime,
            change_time=stat_result.st_ctime,
            size_bytes=stat_result.st_size,
            is_directory=stat.S_ISDIR(stat_result.st_mode),
        )


class FileSystemLoader(Protocol):
    """Uncached filesystem primitives used to populate the caches."""

    async def listdir(self, path: str) -> list[str]:
        """List entry names of a directory."""

    async def read_text(self, path: str) -> str:
        """Read a whole file as text."""

    async def stat(self, path: str) -> FileStat:
        """Stat a path."""


@final
class OsFileSystemLoader:
    """Real filesystem access, run in worker threads."""

    async def listdir(self, path: str) -> list[str]:
        return await asyncio.to_thread(os.listdir, path)

    async def read_text(self, path: str) -> str:
        return await asyncio.to_thread(
            Path(path).read_text,
            encoding=TEXT_ENCODING,
            errors='replace',
        )

    async def stat(self, path: str) -> FileStat:
        stat_result = await asyncio.to_thread(os.stat, path)
        return FileStat.from_os_stat(stat_result)


class MemoTable(Generic[_KeyT, _ValueT]):
    """Unbounded key to result mapping with get-or-compute semantics.

    Only successful results are stored. When ``compute`` raises, the
    exception propagates and the key stays empty, so the next call
    computes again.

    Two coroutines missing the same key at the same time both compute;
    the last one to finish wins.
    """

    def __init__(self, name: str) -> None:
        """Initialize an empty table.

        Args:
            name: Label used in log messages.
        """
        self._name = name
        self._entries: dict[_KeyT, _ValueT] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def get_or_compute(
        self,
        key: _KeyT,
        compute: Callable[[], Awaitable[_ValueT]],
    ) -> _ValueT:
        """Return the stored result for key, computing it on a miss.

        Args:
            key: Cache key, compared by equality.
            compute: Coroutine factory producing the value.

        Returns:
            Stored or freshly computed value.
        """
        if key in self._entries:
            return self._entries[key]

        logger.debug('%s cache miss: %s', self._name, key)
        value = await compute()
        self._entries[key] = value
        return value


@final
class CachedFileSystem:
    """Process-lifetime memoization of listdir, read_text and stat.

    There is no eviction and no invalidation. External changes to the
    tree after the first access of a path are not observed.
    """

    def __init__(self, loader: FileSystemLoader | None = None) -> None:
        """Initialize empty caches.

        Args:
            loader: Uncached primitives, defaults to the real filesystem.
        """
        self._loader = loader or OsFileSystemLoader()
        self._listings: MemoTable[str, list[str]] = MemoTable('listdir')
        self._contents: MemoTable[str, str] = MemoTable('read_text')
        self._stats: MemoTable[str, FileStat] = MemoTable('stat')

    async def listdir(self, path: str) -> list[str]:
        """List a directory, without version control metadata.

        Args:
            path: Directory path.

        Returns:
            Entry names in the order the filesystem returned them.
        """
        return await self._listings.get_or_compute(
            path,
            lambda: self._load_listing(path),
        )

    async def read_text(self, path: str) -> str:
        """Read a file as UTF-8 text.

        Args:
            path: File path.

        Returns:
            Full file content.
        """
        return await self._contents.get_or_compute(
            path,
            lambda: self._loader.read_text(path),
        )

    async def stat(self, path: str) -> FileStat:
        """Stat a path.

        Args:
            path: File or directory path.

        Returns:
            Metadata record for the path.
        """
        return await self._stats.get_or_compute(
            path,
            lambda: self._loader.stat(path),
        )

    async def _load_listing(self, path: str) -> list[str]:
        names = await self._loader.listdir(path)
        return [name for name in names if name not in EXCLUDED_ENTRY_NAMES]
