"""
Utils package initialization.
"""

from coursework.utils.helpers import (
    sanitize_filename,
    get_file_extension,
    build_storage_path,
)

__all__ = [
    "sanitize_filename",
    "get_file_extension",
    "build_storage_path",
]
