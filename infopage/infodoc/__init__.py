"""Info document lookup and normalization."""
from __future__ import annotations

from .discovery import get_info_path, page_filename, locate, discover_info_pages, get_all_pages
from .normalizer import (
    normalize,
    render_page,
    clean_fragment,
    find_included_pages,
    extract_summary,
    decode_page,
    encode_page,
)
from .rules import DEFAULT_RULES, PatternRule, RuleAction, RuleSet

__all__ = [
    'get_info_path',
    'page_filename',
    'locate',
    'discover_info_pages',
    'get_all_pages',
    'normalize',
    'render_page',
    'clean_fragment',
    'find_included_pages',
    'extract_summary',
    'decode_page',
    'encode_page',
    'DEFAULT_RULES',
    'PatternRule',
    'RuleAction',
    'RuleSet',
]
