"""Turn raw info documents into plain text."""
from __future__ import annotations

import logging
import re
from typing import BinaryIO, Callable, List, Optional, Sequence

from ..config import PAGE_ENCODING, PAGE_ERRORS
from ..errors import (
    IncludedPageNotFoundError,
    InclusionCycleError,
    PageNotFoundError,
    PageReadError,
)
from .discovery import locate as locate_page, page_filename
from .rules import DEFAULT_RULES, FRAGMENT_SEPARATOR, INDIRECT_BLOCK_RE, RuleSet

logger = logging.getLogger(__name__)

Locator = Callable[[str], Optional[BinaryIO]]

DIR_ENTRY_RE = re.compile(
    r'START-INFO-DIR-ENTRY\n(.*?)END-INFO-DIR-ENTRY', re.DOTALL
)
DIR_LINE_RE = re.compile(r'^\* [^:]+: \(([^)]+)\)[^.]*\.\s*(.*)$')


def decode_page(data: bytes) -> str:
    """Decode raw page bytes; stray non-UTF-8 bytes survive as surrogates."""
    return data.decode(PAGE_ENCODING, PAGE_ERRORS)


def encode_page(text: str) -> bytes:
    """Inverse of decode_page, restoring any non-UTF-8 bytes."""
    return text.encode(PAGE_ENCODING, PAGE_ERRORS)


def find_included_pages(data: bytes) -> List[str]:
    """Names listed in the first indirect table of a raw document."""
    match = INDIRECT_BLOCK_RE.search(data)
    if match is None:
        return []

    names = []
    # Skip the leading separator and the "Indirect:" line
    for line in match.group(0).split(b'\n')[2:]:
        parts = line.split(b':')
        if len(parts) != 2:
            continue
        names.append(parts[0].decode(PAGE_ENCODING, PAGE_ERRORS))
    return names


def clean_fragment(fragment: str, rules: RuleSet = DEFAULT_RULES) -> str:
    """Apply substitutions, then drop the fragment if it is boilerplate."""
    for rule in rules.substitutions:
        fragment = rule.apply(fragment)

    for rule in rules.deletions:
        if rule.matches(fragment):
            logger.debug("dropping fragment matched by %s", rule.name)
            return ""

    return fragment.strip()


def render_page(
    name: str,
    locate: Locator = locate_page,
    rules: RuleSet = DEFAULT_RULES,
    _chain: Sequence[str] = (),
    _included: bool = False,
) -> str:
    """Locate, read and normalize a page by name.

    Raises:
        PageNotFoundError: The page is not on the info path.
        IncludedPageNotFoundError: Same, for a page named in an indirect table.
        InclusionCycleError: The page is already being resolved further up.
        PageReadError: The page could not be read or decompressed.
    """
    key = page_filename(name)
    if key in _chain:
        raise InclusionCycleError([*_chain, key])

    fp = locate(name)
    if fp is None:
        if _included:
            raise IncludedPageNotFoundError(name)
        raise PageNotFoundError(name)

    try:
        data = fp.read()
    except (OSError, EOFError) as e:
        raise PageReadError(name, e) from e
    finally:
        fp.close()

    return normalize(data, locate=locate, rules=rules, _chain=(*_chain, key))


def normalize(
    data: bytes,
    locate: Locator = locate_page,
    rules: RuleSet = DEFAULT_RULES,
    _chain: Sequence[str] = (),
) -> str:
    """Normalize a raw info document to plain text.

    Pages named in an indirect table are rendered recursively and appended
    after the document's own text.

    Args:
        data: Raw (decompressed) document bytes.
        locate: Opens included pages by name.
        rules: Substitution and deletion rules.

    Returns:
        The cleaned text, ending in exactly one newline.
    """
    subpages = []
    for name in find_included_pages(data):
        logger.debug("including %s", name)
        subpages.append(render_page(
            name, locate=locate, rules=rules, _chain=_chain, _included=True
        ).strip())

    parts = clean_fragments(data, rules)

    return "\n\n".join(parts + subpages).strip() + "\n"


def clean_fragments(data: bytes, rules: RuleSet = DEFAULT_RULES) -> List[str]:
    """Split a raw document into fragments and keep the non-empty cleaned ones."""
    fragments = decode_page(data).split(FRAGMENT_SEPARATOR)
    return [f for f in (clean_fragment(f, rules) for f in fragments) if f]


def extract_summary(name: str, data: bytes) -> str:
    """Extract the dir entry description of a manual as its summary.

    Falls back to the first substantial line of the cleaned text. Indirect
    tables are not followed.
    """
    text = decode_page(data)

    descriptions = []
    match = DIR_ENTRY_RE.search(text)
    if match:
        for line in match.group(1).splitlines():
            entry = DIR_LINE_RE.match(line.strip())
            if entry and entry.group(2):
                # One file can register several entries, prefer its own
                if entry.group(1) == name:
                    return entry.group(2).strip()
                descriptions.append(entry.group(2).strip())
    if descriptions:
        return descriptions[0]

    for fragment in clean_fragments(data):
        for line in fragment.splitlines()[:20]:
            stripped = line.strip()
            if len(stripped) > 20 and not stripped.isupper():
                return stripped

    return f"{name} - info manual"
