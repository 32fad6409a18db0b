"""Configuration and constants for infopage."""
from __future__ import annotations

import os
from pathlib import Path

# Set environment variables before importing torch-based libraries
os.environ.setdefault('TOKENIZERS_PARALLELISM', 'false')
os.environ.setdefault('OMP_NUM_THREADS', '1')
os.environ.setdefault('MKL_NUM_THREADS', '1')

# Info page lookup
DEFAULT_INFO_DIR = '/usr/share/info/'
INFOPATH_ENV = 'INFOPATH'
INFO_EXT = '.info'
PAGE_MARKER = '.info'  # Names like "tar.info-1" already carry it
GZIP_SUFFIX = '.gz'

# Paging
PAGER_ENV_VARS = ('MANPAGER', 'PAGER')
DEFAULT_PAGER = 'more -s'
TEMPFILE_PREFIX = 'info.'

# Apropos index paths (created when the index is first saved)
INFOPAGE_DIR = Path(os.environ.get('INFOPAGE_HOME') or Path.home() / ".infopage")

FAISS_INDEX_FILE = INFOPAGE_DIR / "vectors.faiss"
CHUNKS_FILE = INFOPAGE_DIR / "chunks.pkl"
METADATA_FILE = INFOPAGE_DIR / "metadata.json"

# Embedding model configuration
EMBEDDING_MODEL_NAME = 'all-MiniLM-L6-v2'
MAX_TEXT_LENGTH = 8000  # ~2000 tokens worth of text

# Indexing defaults
DEFAULT_WORKERS = 8
DEFAULT_TOP_K = 20

# Bytes that are not UTF-8 pass through to the output unchanged
PAGE_ENCODING = 'utf-8'
PAGE_ERRORS = 'surrogateescape'
