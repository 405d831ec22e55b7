"""Application configuration with sensible defaults."""
import os
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DOCRAG_DATA_DIR", str(BASE_DIR / "data")))
DOCUMENTS_DIR = Path(os.getenv("DOCUMENTS_DIR", str(BASE_DIR / "documents")))

# Voyage AI embedding provider
VOYAGE_API_KEY = os.getenv("VOYAGE_API_KEY")
VOYAGE_BASE_URL = os.getenv("VOYAGE_BASE_URL", "https://api.voyageai.com/v1")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "voyage-3-large")
EMBEDDING_TIMEOUT = float(os.getenv("EMBEDDING_TIMEOUT", "60.0"))

# Shared by the embedding client, the store codec and the ranker
EMBEDDING_DIMENSION = int(os.getenv("EMBEDDING_DIMENSION", "1024"))
EMBEDDING_BATCH_SIZE = int(os.getenv("EMBEDDING_BATCH_SIZE", "128"))

# RAG parameters (character-based, word-bounded)
CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", "800"))
CHUNK_OVERLAP = int(os.getenv("CHUNK_OVERLAP", "200"))
RETRIEVAL_TOP_K = int(os.getenv("RETRIEVAL_TOP_K", "5"))
MAX_QUERY_LENGTH = int(os.getenv("MAX_QUERY_LENGTH", "2000"))

# Files treated as documents during ingestion
DOCUMENT_PATTERNS = [
    p.strip() for p in os.getenv("DOCUMENT_PATTERNS", "*.md,*.txt").split(",") if p.strip()
]

# Database
DB_PATH = Path(os.getenv("DB_PATH", str(DATA_DIR / "vectors.db")))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
