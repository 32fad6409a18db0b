"""Command-line interface for infopage."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Dict, List, Optional, Sequence

from .config import DEFAULT_TOP_K, DEFAULT_WORKERS
from .errors import InfoError, UsageError
from .infodoc import encode_page, render_page
from .pager import page_text

PROG = "infopage"


def print_results(results: List[Dict[str, str]], n: int):
    """Print apropos results to stdout."""
    if not results:
        print("No results found.")
        return

    for i, result in enumerate(results[:n], 1):
        page = result.get('page', 'unknown')
        description = result.get('semantic_summary', 'No description')
        print(f"{i:2d}. {page:<20} {description}")


def ensure_index_exists(force_reindex: bool, max_workers: int, verbose: bool = True) -> bool:
    """Ensure the apropos index exists, building if necessary.

    Returns True if index was built/rebuilt, False if it already existed.
    """
    # Deferred so plain page display never loads faiss
    from .rag import build_vector_database, index_exists

    if force_reindex or not index_exists():
        if verbose:
            print("Building index...")
        build_vector_database(verbose=verbose, max_workers=max_workers, force=force_reindex)
        return True

    return False


def run_apropos(query: str, args: argparse.Namespace):
    from .rag import search_vector_database

    ensure_index_exists(args.force_reindex, args.workers, verbose=sys.stdout.isatty())
    print_results(search_vector_database(query, top_k=args.n), args.n)


def show_page(name: Optional[str]):
    """Render a page and page it on a terminal, or print it otherwise."""
    if not name:
        raise UsageError("which page?")

    text = render_page(name)

    if sys.stdout.isatty():
        page_text(text)
        return

    sys.stdout.flush()
    sys.stdout.buffer.write(encode_page(text) + b"\n")
    sys.stdout.flush()


def silence_stdout():
    """Point stdout at /dev/null so the exit-time flush cannot fail again."""
    try:
        fd = sys.stdout.fileno()
    except (OSError, ValueError):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fd)
    os.close(devnull)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Display texinfo pages as plain text.",
        epilog="Example: infopage tar"
    )
    parser.add_argument("page", nargs='?', help="Info page to display (e.g., 'tar')")
    parser.add_argument("--apropos", metavar="QUERY", help="Search installed manuals by meaning")
    parser.add_argument("-n", type=int, default=DEFAULT_TOP_K, help=f"Number of apropos results (default: {DEFAULT_TOP_K})")
    parser.add_argument("--force-reindex", action="store_true", help="Rebuild the apropos index from scratch")
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS, help=f"Number of parallel workers for indexing (default: {DEFAULT_WORKERS})")
    parser.add_argument("--debug", action="store_true", help="Log lookup and normalization details to stderr")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        if args.apropos is not None:
            run_apropos(args.apropos, args)
        elif args.force_reindex and not args.page:
            ensure_index_exists(True, args.workers, verbose=True)
        else:
            show_page(args.page)
    except InfoError as e:
        print(f"{PROG}: {e}", file=sys.stderr)
        return 1
    except BrokenPipeError:
        # Reader went away early (head, grep -q)
        silence_stdout()
        return 1

    return 0
