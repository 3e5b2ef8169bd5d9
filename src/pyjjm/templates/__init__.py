"""Jinja2 template engine for JJM file generation."""

from __future__ import annotations

from pyjjm.templates.engine import TemplateEngine
from pyjjm.templates.filters import (
    jjm_comment,
    jjm_timestamp,
    register_all_filters,
)

__all__ = [
    "TemplateEngine",
    "jjm_comment",
    "jjm_timestamp",
    "register_all_filters",
]
