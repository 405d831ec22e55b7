"""docrag: chunking, embedding storage and cosine retrieval for text documents."""

__version__ = "0.1.0"
