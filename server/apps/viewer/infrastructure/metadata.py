"""Stats row construction for directory and file views."""

import math
import os
import re
from datetime import datetime
from typing import Final, TypeAlias

from server.apps.viewer.infrastructure.cached_fs import FileStat

StatsRow: TypeAlias = list[str | int]

_SIZE_UNITS: Final = ('B', 'KB', 'MB', 'GB', 'TB')
_SIZE_BASE: Final = 1024

_TIMESTAMP_FORMAT: Final = '%m/%d/%Y, %I:%M:%S %p'

_EMPTY_LINE_RE: Final = re.compile(r'^\s*$')


def format_size(size_bytes: int) -> str:
    """Format a byte count for display.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Human readable size (e.g., '512 B', '1.5 KB').
        Returns 'n/a' for zero bytes.
    """
    if size_bytes == 0:
        return 'n/a'

    exponent = min(
        math.floor(math.log(size_bytes) / math.log(_SIZE_BASE)),
        len(_SIZE_UNITS) - 1,
    )

    if exponent == 0:
        return f'{size_bytes} {_SIZE_UNITS[0]}'

    scaled = size_bytes / _SIZE_BASE ** exponent
    return f'{scaled:.1f} {_SIZE_UNITS[exponent]}'


def format_timestamp(timestamp: float) -> str:
    """Format a POSIX timestamp in local time.

    Args:
        timestamp: Seconds since the epoch.

    Returns:
        Local date and time (e.g., '10/18/2026, 07:32:00 AM').
    """
    return datetime.fromtimestamp(timestamp).strftime(_TIMESTAMP_FORMAT)  # noqa: DTZ006


def count_lines(content: str) -> tuple[int, int]:
    """Count total and non-blank lines.

    Lines are split on the platform line separator.

    Args:
        content: File text.

    Returns:
        Tuple of (line count, non-empty line count).
    """
    lines = content.split(os.linesep)
    non_empty = [line for line in lines if not _EMPTY_LINE_RE.match(line)]
    return len(lines), len(non_empty)


def build_stats(
    file_stat: FileStat,
    *,
    child_files: list[str] | None = None,
    content: str | None = None,
) -> list[StatsRow]:
    """Build ordered stats rows for display.

    Args:
        file_stat: Stats of the viewed path.
        child_files: Listed children, for directory views.
        content: File text, for file views.

    Returns:
        List of [label, value] rows.
    """
    rows: list[StatsRow] = [
        ['atime', format_timestamp(file_stat.access_time)],
        ['mtime', format_timestamp(file_stat.modify_time)],
        ['ctime', format_timestamp(file_stat.change_time)],
        ['size', format_size(file_stat.size_bytes)],
    ]

    if child_files is not None:
        rows.insert(0, ['files', len(child_files)])

    # Empty files get no line counts
    if content:
        line_count, non_empty_count = count_lines(content)
        rows.extend((
            ['lines', line_count],
            ['non empty lines', non_empty_count],
        ))

    return rows
