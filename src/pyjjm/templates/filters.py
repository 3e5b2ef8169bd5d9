"""
Custom Jinja2 filters for JJM file formatting.
"""

from __future__ import annotations

from datetime import datetime

from pyjjm.io.jjm_reader import COMMENT_CHAR


def jjm_comment(text: str) -> str:
    """
    Format text as a JJM comment line.

    A space always follows the ``#`` so that header words never read back
    as field labels.

    Args:
        text: Comment text

    Returns:
        Comment line without trailing newline
    """
    text = str(text).strip()
    return f"{COMMENT_CHAR} {text}" if text else COMMENT_CHAR


def jjm_timestamp(dt: datetime | str | None) -> str:
    """
    Format a timestamp for a file header.

    Args:
        dt: Datetime (or preformatted string); ``None`` gives ``""``

    Returns:
        ``YYYY-MM-DD HH:MM:SS`` string
    """
    if dt is None:
        return ""
    if isinstance(dt, str):
        return dt
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def register_all_filters(env) -> None:
    """
    Register all JJM filters with a Jinja2 environment.

    Args:
        env: Jinja2 Environment instance
    """
    env.filters["jjm_comment"] = jjm_comment
    env.filters["jjm_timestamp"] = jjm_timestamp
