"""Vector database operations using FAISS."""
from __future__ import annotations

import json
import logging
import pickle
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from functools import partial
from typing import Dict, List, Optional, Sequence, Tuple

import faiss
import numpy as np

from .. import config
from ..config import DEFAULT_TOP_K, DEFAULT_WORKERS, PAGE_ENCODING
from ..errors import InfoError, PageReadError
from ..infodoc import encode_page, extract_summary, get_all_pages, get_info_path, locate, normalize
from .embeddings import embed_pages, embed_query

logger = logging.getLogger(__name__)


def index_exists() -> bool:
    """Check whether a saved index is on disk."""
    return config.FAISS_INDEX_FILE.exists() and config.CHUNKS_FILE.exists()


def load_vector_database() -> Optional[Tuple[faiss.Index, List[Dict[str, str]]]]:
    """Load the FAISS index and chunks from disk."""
    if not index_exists():
        return None

    try:
        index = faiss.read_index(str(config.FAISS_INDEX_FILE))

        with open(config.CHUNKS_FILE, 'rb') as f:
            chunks = pickle.load(f)

        return index, chunks
    except Exception as e:
        print(f"Error loading database: {e}", file=sys.stderr)
        return None


def get_indexed_pages() -> List[str]:
    """Get list of already indexed pages from metadata."""
    if not config.METADATA_FILE.exists():
        return []

    try:
        with open(config.METADATA_FILE) as f:
            metadata = json.load(f)
            return metadata.get("pages", [])
    except (OSError, ValueError):
        return []


def save_vector_database(
    chunks: List[Dict[str, str]],
    embeddings: np.ndarray,
    pages: List[str],
    verbose: bool = True,
):
    """Save the FAISS index and chunks to disk."""
    config.INFOPAGE_DIR.mkdir(parents=True, exist_ok=True)

    # L2 distance over normalized vectors ranks like cosine similarity
    embeddings = np.ascontiguousarray(embeddings, dtype=np.float32)
    dimension = embeddings.shape[1]
    index = faiss.IndexFlatL2(dimension)
    faiss.normalize_L2(embeddings)
    index.add(embeddings)

    faiss.write_index(index, str(config.FAISS_INDEX_FILE))

    with open(config.CHUNKS_FILE, 'wb') as f:
        pickle.dump(chunks, f)

    metadata = {
        "num_chunks": len(chunks),
        "num_pages": len(pages),
        "dimension": dimension,
        "indexed_at": datetime.now().isoformat(timespec='seconds'),
        "pages": sorted(pages),
    }
    with open(config.METADATA_FILE, 'w') as f:
        json.dump(metadata, f, indent=2)

    if verbose:
        print(f"✓ Saved {len(chunks)} chunks to FAISS index at {config.FAISS_INDEX_FILE}")


def process_page(name: str, dirs: Sequence[str]) -> Optional[Tuple[str, str, str]]:
    """Render a single page for indexing.

    Returns:
        (page_name, text, summary) or None if the page cannot be rendered.
    """
    try:
        fp = locate(name, dirs)
        if fp is None:
            return None
        try:
            data = fp.read()
        except (OSError, EOFError) as e:
            raise PageReadError(name, e) from e
        finally:
            fp.close()

        text = normalize(data, locate=partial(locate, dirs=dirs))
    except InfoError as e:
        logger.debug("skipping %s: %s", name, e)
        return None

    # Summaries are printed, so undecodable bytes become U+FFFD
    summary = encode_page(extract_summary(name, data)).decode(PAGE_ENCODING, 'replace')
    return name, text, summary


def _reconstruct_embeddings(index: faiss.Index) -> Optional[np.ndarray]:
    """Pull stored vectors back out of a flat index."""
    try:
        return index.reconstruct_n(0, index.ntotal)
    except RuntimeError as e:
        logger.debug("could not extract existing embeddings: %s", e)
        return None


def build_vector_database(
    pages: Optional[List[str]] = None,
    verbose: bool = True,
    max_workers: int = DEFAULT_WORKERS,
    force: bool = False,
    dirs: Optional[Sequence[str]] = None,
):
    """Build or update the index of info manuals.

    Args:
        pages: Optional list of pages to index. If None, discovers from INFOPATH.
        verbose: Show progress information.
        max_workers: Number of parallel workers.
        force: Force full reindex, ignoring existing data.
        dirs: Info directories to read from. If None, uses INFOPATH.
    """
    if dirs is None:
        dirs = get_info_path()

    if pages is None:
        pages = get_all_pages(dirs)
        if verbose:
            print(f"Found {len(pages)} info manuals")

    existing_pages: List[str] = []
    existing_chunks: List[Dict[str, str]] = []
    existing_embeddings = None
    if not force:
        existing_pages = get_indexed_pages()
        db = load_vector_database() if existing_pages else None
        if db:
            existing_index, existing_chunks = db
            existing_embeddings = _reconstruct_embeddings(existing_index)
        if existing_embeddings is None:
            # Nothing reusable, re-embed everything
            existing_pages, existing_chunks = [], []

    pages_set = set(pages)
    existing_set = set(existing_pages)
    new_pages = sorted(pages_set - existing_set)
    removed_pages = existing_set - pages_set

    if verbose and existing_pages:
        print(f"  Already indexed: {len(existing_pages)} manuals")
        if removed_pages:
            print(f"  Removed from INFOPATH: {len(removed_pages)} manuals")
        print(f"  New to index: {len(new_pages)} manuals")

    if not new_pages and not removed_pages and existing_pages:
        return

    if removed_pages:
        keep = [i for i, c in enumerate(existing_chunks) if c.get('page') not in removed_pages]
        existing_chunks = [existing_chunks[i] for i in keep]
        existing_embeddings = existing_embeddings[keep] if keep else None
        existing_pages = [p for p in existing_pages if p not in removed_pages]

    new_chunks = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(process_page, page, dirs) for page in new_pages]

        completed = 0
        for future in as_completed(futures):
            result = future.result()
            completed += 1
            if result:
                page, text, summary = result
                new_chunks.append({
                    "page": page,
                    "text": text,
                    "semantic_summary": summary,
                    "line_count": len(text.split('\n')),
                    "word_count": len(text.split()),
                    "char_count": len(text),
                })
            if verbose:
                sys.stdout.write(f'\r  [{completed}/{len(new_pages)}] Rendered {len(new_chunks)} manuals...')
                sys.stdout.flush()

    if verbose and new_pages:
        sys.stdout.write('\n')

    if not new_chunks and not existing_chunks:
        if verbose:
            print("\nNothing to index!")
        return

    # Keep chunk order independent of worker scheduling
    new_chunks.sort(key=lambda c: c["page"])

    parts = []
    if existing_embeddings is not None and len(existing_chunks) > 0:
        parts.append(existing_embeddings)
    if new_chunks:
        if verbose:
            print(f"Embedding {len(new_chunks)} new manuals...")
        parts.append(embed_pages([c["text"] for c in new_chunks]))

    all_chunks = existing_chunks + new_chunks
    all_pages = sorted(set(existing_pages) | {c["page"] for c in new_chunks})
    save_vector_database(all_chunks, np.vstack(parts), all_pages, verbose=verbose)

    if verbose:
        print(f"✓ Total: {len(all_pages)} manuals indexed")


def search_vector_database(query: str, top_k: int = DEFAULT_TOP_K) -> List[Dict[str, str]]:
    """Search using FAISS semantic similarity.

    Args:
        query: Search query string
        top_k: Number of top results to return

    Returns:
        List of matching manuals with similarity scores
    """
    result = load_vector_database()
    if not result:
        return []

    index, chunks = result

    query_embedding = embed_query(query)
    faiss.normalize_L2(query_embedding)

    actual_top_k = min(top_k, len(chunks))
    if actual_top_k == 0:
        return []

    distances, indices = index.search(query_embedding, actual_top_k)

    result_chunks = []
    for idx, dist in zip(indices[0], distances[0]):
        if 0 <= idx < len(chunks):
            chunk = chunks[idx].copy()
            # Squared L2 between unit vectors -> similarity in [0, 1]
            chunk['similarity'] = float(1 - (dist / 2))
            result_chunks.append(chunk)

    return result_chunks
