"""Shared table I/O and schema checks."""

from src.utils.frames import read_table, require_columns, write_table

__all__ = [
    'read_table',
    'require_columns',
    'write_table',
]
