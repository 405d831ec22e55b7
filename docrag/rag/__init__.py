"""RAG (Retrieval-Augmented Generation) pipeline components.

This package contains modules for:
- Document chunking with word-bounded overlap
- Embedding byte encoding
- SQLite vector storage
- Cosine-similarity ranking
- Ingestion and retrieval orchestration
"""
