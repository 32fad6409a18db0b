"""Semantic apropos index over installed info manuals."""
from __future__ import annotations

from .embeddings import get_embedding_model
from .database import (
    load_vector_database,
    save_vector_database,
    build_vector_database,
    search_vector_database,
    get_indexed_pages,
    index_exists,
)

__all__ = [
    'get_embedding_model',
    'load_vector_database',
    'save_vector_database',
    'build_vector_database',
    'search_vector_database',
    'get_indexed_pages',
    'index_exists',
]
