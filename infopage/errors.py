"""Exceptions raised while locating, normalizing and paging info pages."""
from __future__ import annotations

from typing import Sequence


class InfoError(Exception):
    """Base exception for everything the CLI reports as a fatal error."""
    pass


class UsageError(InfoError):
    """Raised when the command line does not name a page."""
    pass


class PageNotFoundError(InfoError):
    """Raised when no search directory holds the requested page."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'no page for "{name}"')


class IncludedPageNotFoundError(PageNotFoundError):
    """Raised when a page listed in an indirect table cannot be located."""

    def __init__(self, name: str):
        super().__init__(name)
        self.args = (f'could not find included page "{name}"',)


class InclusionCycleError(InfoError):
    """Raised when indirect tables reference a page already being resolved."""

    def __init__(self, chain: Sequence[str]):
        self.chain = tuple(chain)
        super().__init__("inclusion cycle detected: " + " -> ".join(self.chain))


class PageReadError(InfoError):
    """Raised when a page exists but cannot be read, decompressed or written out."""

    def __init__(self, name: str, cause: BaseException):
        self.name = name
        self.cause = cause
        super().__init__(f"{name}: {cause}")


class PagerError(InfoError):
    """Raised when the pager cannot be started or exits with an error."""

    def __init__(self, command: str, cause: BaseException):
        self.command = command
        self.cause = cause
        super().__init__(f"pager {command!r} failed: {cause}")
