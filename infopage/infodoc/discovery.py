"""Info page lookup along INFOPATH, handling gzip compression."""
from __future__ import annotations

import gzip
import logging
import os
from pathlib import Path
from typing import BinaryIO, Dict, List, Mapping, Optional, Sequence

from ..config import DEFAULT_INFO_DIR, GZIP_SUFFIX, INFO_EXT, INFOPATH_ENV, PAGE_MARKER
from ..errors import PageReadError

logger = logging.getLogger(__name__)


def get_info_path(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """Get the list of info directories to search, in order."""
    if environ is None:
        environ = os.environ

    dirs = [p for p in environ.get(INFOPATH_ENV, '').split(':') if p]
    if dirs:
        return dirs

    return [DEFAULT_INFO_DIR]


def page_filename(name: str) -> str:
    """File name for a page, e.g. tar -> tar.info, tar.info-1 -> tar.info-1."""
    if PAGE_MARKER in name:
        return name
    return name + INFO_EXT


def locate(name: str, dirs: Optional[Sequence[str]] = None) -> Optional[BinaryIO]:
    """Open the raw contents of an info page.

    Args:
        name: Page name as given on the command line or in an indirect table.
        dirs: Directories to search. If None, uses INFOPATH.

    Returns:
        A binary stream the caller must close, or None if no directory has
        the page (plain or gzipped).

    Raises:
        PageReadError: The page file exists but could not be opened.
    """
    if dirs is None:
        dirs = get_info_path()

    filename = page_filename(name)

    for info_dir in dirs:
        path = Path(info_dir) / filename
        logger.debug("trying %s", path)
        try:
            return open(path, 'rb')
        except FileNotFoundError:
            pass
        except OSError as e:
            raise PageReadError(str(path), e) from e

        gz_path = path.with_name(path.name + GZIP_SUFFIX)
        logger.debug("trying %s", gz_path)
        try:
            # Decompression errors surface on read
            return gzip.open(gz_path, 'rb')
        except FileNotFoundError:
            continue
        except OSError as e:
            raise PageReadError(str(gz_path), e) from e

    return None


def _strip_page_suffix(filename: str) -> Optional[str]:
    """Page name for a top-level info file name, or None for anything else."""
    if filename.endswith(GZIP_SUFFIX):
        filename = filename[:-len(GZIP_SUFFIX)]
    if not filename.endswith(INFO_EXT):
        # Split parts (tar.info-1) and unrelated files
        return None
    return filename[:-len(INFO_EXT)] or None


def discover_info_pages(dirs: Optional[Sequence[str]] = None) -> Dict[str, Path]:
    """Discover all available info pages by scanning the info directories.

    Args:
        dirs: Directories to scan. If None, uses INFOPATH.

    Returns:
        Dictionary mapping page name to the file holding it
    """
    if dirs is None:
        dirs = get_info_path()

    pages: Dict[str, Path] = {}

    for info_dir in dirs:
        try:
            entries = sorted(Path(info_dir).iterdir())
        except (PermissionError, OSError):
            continue

        for entry in entries:
            if not entry.is_file():
                continue

            name = _strip_page_suffix(entry.name)
            if name is None:
                continue

            # Prefer earlier directories, then the uncompressed file
            if name not in pages:
                pages[name] = entry

    return pages


def get_all_pages(dirs: Optional[Sequence[str]] = None) -> List[str]:
    """Get all unique page names available on the info path."""
    return sorted(discover_info_pages(dirs).keys())
