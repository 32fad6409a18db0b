"""Hand normalized text to an external pager."""
from __future__ import annotations

import contextlib
import os
import shlex
import subprocess
import tempfile
from typing import Callable, Mapping, Optional

from .config import DEFAULT_PAGER, PAGER_ENV_VARS, TEMPFILE_PREFIX
from .errors import PageReadError, PagerError
from .infodoc import encode_page


def resolve_pager_command(environ: Optional[Mapping[str, str]] = None) -> str:
    """Pick the pager from MANPAGER, then PAGER, then the default."""
    if environ is None:
        environ = os.environ

    for var in PAGER_ENV_VARS:
        if environ.get(var):
            return environ[var]
    return DEFAULT_PAGER


def page_text(
    text: str,
    command: Optional[str] = None,
    run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
):
    """Show text in a pager, blocking until it exits.

    The text goes through a temporary file so the pager keeps the terminal
    on stdin. The file is removed once the pager is done.
    """
    if command is None:
        command = resolve_pager_command()

    try:
        fd, path = tempfile.mkstemp(prefix=TEMPFILE_PREFIX)
    except OSError as e:
        raise PageReadError(TEMPFILE_PREFIX, e) from e

    try:
        try:
            with open(fd, 'wb') as tmp:
                tmp.write(encode_page(text))
        except OSError as e:
            raise PageReadError(path, e) from e

        try:
            # Standard streams are inherited
            run(f"{command} {shlex.quote(path)}", shell=True, check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            raise PagerError(command, e) from e
    finally:
        # The pager may already have removed it
        with contextlib.suppress(FileNotFoundError):
            os.remove(path)
