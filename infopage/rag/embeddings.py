"""Sentence embeddings for manual text and apropos queries."""
from __future__ import annotations

import threading
from typing import Any, Dict, List

import numpy as np

from ..config import EMBEDDING_MODEL_NAME, MAX_TEXT_LENGTH, PAGE_ENCODING
from ..infodoc import encode_page

# Loaded models by name; indexing may ask from several worker threads
_MODELS: Dict[str, Any] = {}
_MODELS_LOCK = threading.Lock()


def get_embedding_model(name: str = EMBEDDING_MODEL_NAME) -> Any:
    """Load a SentenceTransformer once per model name."""
    with _MODELS_LOCK:
        if name not in _MODELS:
            from sentence_transformers import SentenceTransformer

            _MODELS[name] = SentenceTransformer(name)
        return _MODELS[name]


def embeddable_text(text: str) -> str:
    """Truncate page text and swap undecodable bytes for U+FFFD.

    Pages keep non-UTF-8 bytes as surrogates, which tokenizers reject.
    """
    return encode_page(text[:MAX_TEXT_LENGTH]).decode(PAGE_ENCODING, 'replace')


def embed_pages(texts: List[str], model_name: str = EMBEDDING_MODEL_NAME) -> np.ndarray:
    """Embed rendered pages as a float32 matrix, one row per page."""
    model = get_embedding_model(model_name)
    vectors = model.encode(
        [embeddable_text(t) for t in texts], convert_to_numpy=True, show_progress_bar=False
    )
    return np.ascontiguousarray(vectors, dtype=np.float32)


def embed_query(query: str, model_name: str = EMBEDDING_MODEL_NAME) -> np.ndarray:
    """Embed a search query as a 1 x dimension float32 matrix."""
    model = get_embedding_model(model_name)
    vector = np.asarray(model.encode(query, convert_to_numpy=True), dtype=np.float32)
    return np.ascontiguousarray(vector.reshape(1, -1))
