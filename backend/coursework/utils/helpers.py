"""
Utility functions and helpers.
"""

import re
import uuid


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a filename by removing or replacing invalid characters.

    Args:
        filename: Original filename.

    Returns:
        Sanitized filename.
    """
    sanitized = re.sub(r'[<>:"/\\|?*]', "_", filename)
    sanitized = re.sub(r"\s+", "_", sanitized)
    sanitized = sanitized.strip("._")
    if len(sanitized) > 200:
        ext_match = re.search(r"\.[a-zA-Z0-9]+$", sanitized)
        ext = ext_match.group() if ext_match else ""
        sanitized = sanitized[: 200 - len(ext)] + ext
    return sanitized or "file"


def get_file_extension(filename: str) -> str:
    """Lower-case text after the final dot, or '' when there is none."""
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def build_storage_path(purpose: str, owner_id: str, filename: str) -> str:
    """
    Storage path for an uploaded file: '<purpose>/<owner>/<unique name>'.

    The unique name keeps the sanitized original name after a short random prefix
    so two uploads of the same file never collide.
    """
    unique = f"{uuid.uuid4().hex[:12]}_{sanitize_filename(filename)}"
    return f"{purpose}/{owner_id}/{unique}"
