"""Shared fixtures for viewer app tests."""

import asyncio
import errno
from collections import Counter

import pytest

from server.apps.viewer.infrastructure.cached_fs import (
    CachedFileSystem,
    FileStat,
)
from server.apps.viewer.logic import browse_operations
from server.apps.viewer.logic.browse_operations import FileBrowser
from server.apps.viewer.logic.navigation_operations import NavigationResolver
from server.apps.viewer.path_mapper import PathMapper

FAKE_ROOT = '/srv/files'


def _missing(path: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, 'No such file or directory', path)


class FakeLoader:
    """In-memory filesystem that counts every primitive call.

    Directories map to entry lists, kept in the given order so tests
    control listing order. Files map to their text. Paths in
    ``failures`` raise PermissionError.
    """

    def __init__(self, tree: dict[str, list[str] | str]) -> None:
        self.tree = dict(tree)
        self.calls: Counter[tuple[str, str]] = Counter()
        self.failures: set[str] = set()

    async def listdir(self, path: str) -> list[str]:
        entry = await self._lookup('listdir', path)
        if not isinstance(entry, list):
            raise NotADirectoryError(errno.ENOTDIR, 'Not a directory', path)
        return list(entry)

    async def read_text(self, path: str) -> str:
        entry = await self._lookup('read_text', path)
        if isinstance(entry, list):
            raise IsADirectoryError(errno.EISDIR, 'Is a directory', path)
        return entry

    async def stat(self, path: str) -> FileStat:
        entry = await self._lookup('stat', path)
        is_directory = isinstance(entry, list)
        return FileStat(
            access_time=0.0,
            modify_time=0.0,
            change_time=0.0,
            size_bytes=0 if is_directory else len(entry.encode()),
            is_directory=is_directory,
        )

    async def _lookup(self, operation: str, path: str) -> list[str] | str:
        self.calls[(operation, path)] += 1
        # Yield so concurrent callers interleave like real I/O
        await asyncio.sleep(0)
        key = path.rstrip('/') or '/'
        if key in self.failures:
            raise PermissionError(errno.EACCES, 'Permission denied', path)
        if key not in self.tree:
            raise _missing(path)
        return self.tree[key]


@pytest.fixture
def fake_tree():
    """Directory tree served by the fake loader.

    Listing order is deliberately not alphabetical.

    Returns:
        Mapping of absolute paths to entry lists or file text.
    """
    return {
        FAKE_ROOT: ['readme.txt', 'docs', 'notes.md', '.git'],
        f'{FAKE_ROOT}/readme.txt': 'hello',
        f'{FAKE_ROOT}/notes.md': 'world',
        f'{FAKE_ROOT}/.git': ['HEAD'],
        f'{FAKE_ROOT}/.git/HEAD': 'ref: refs/heads/main',
        f'{FAKE_ROOT}/docs': ['c.txt', 'a.txt', 'hello-dir', 'b.txt'],
        f'{FAKE_ROOT}/docs/c.txt': 'gamma',
        f'{FAKE_ROOT}/docs/a.txt': 'alpha\n\nfirst letter',
        f'{FAKE_ROOT}/docs/b.txt': 'beta',
        f'{FAKE_ROOT}/docs/hello-dir': ['deep.txt'],
        f'{FAKE_ROOT}/docs/hello-dir/deep.txt': 'Hello World',
    }


@pytest.fixture
def fake_loader(fake_tree):
    """Create counting fake loader.

    Args:
        fake_tree: Tree fixture.

    Returns:
        FakeLoader instance.
    """
    return FakeLoader(fake_tree)


@pytest.fixture
def cached_fs(fake_loader):
    """Create cached filesystem over the fake loader.

    Args:
        fake_loader: Fake loader fixture.

    Returns:
        CachedFileSystem instance.
    """
    return CachedFileSystem(fake_loader)


@pytest.fixture
def path_mapper():
    """Create PathMapper for the fake root.

    Returns:
        PathMapper instance.
    """
    return PathMapper(FAKE_ROOT)


@pytest.fixture
def resolver(cached_fs, path_mapper):
    """Create navigation resolver over the fake tree.

    Args:
        cached_fs: Cached filesystem fixture.
        path_mapper: Path mapper fixture.

    Returns:
        NavigationResolver instance.
    """
    return NavigationResolver(cached_fs, path_mapper)


@pytest.fixture
def fake_browser(cached_fs):
    """Create file browser over the fake tree.

    Args:
        cached_fs: Cached filesystem fixture.

    Returns:
        FileBrowser instance.
    """
    return FileBrowser(FAKE_ROOT, cached_fs)


@pytest.fixture
def disk_tree(tmp_path):
    """Create a small directory tree on disk.

    Args:
        tmp_path: Pytest temporary directory.

    Returns:
        Root path of the tree.
    """
    (tmp_path / 'readme.txt').write_text('hello\nworld\n', encoding='utf-8')
    (tmp_path / 'empty.txt').write_bytes(b'')
    (tmp_path / 'docs').mkdir()
    (tmp_path / 'docs' / 'guide.md').write_text('# Guide', encoding='utf-8')
    (tmp_path / '.git').mkdir()
    (tmp_path / '.git' / 'HEAD').write_text('ref', encoding='utf-8')
    return tmp_path


@pytest.fixture
def served_browser(disk_tree, monkeypatch):
    """Install a process-wide browser rooted at the disk tree.

    Args:
        disk_tree: Disk tree fixture.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        FileBrowser instance used by the view.
    """
    browser = FileBrowser(disk_tree)
    monkeypatch.setattr(browse_operations, '_browser', browser)
    return browser
