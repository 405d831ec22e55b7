"""Exceptions raised by the docrag core."""


class DocRAGError(Exception):
    """Base exception for all docrag errors."""
    pass


class InputError(DocRAGError):
    """
    Invalid input supplied by the caller.

    Raised when:
    - The documents directory is missing or unreadable
    - A document is not valid UTF-8 text
    - A query is empty or too long
    - top_k is not a positive integer
    """
    pass


class ProviderError(DocRAGError):
    """
    Error communicating with the embedding provider.

    Raised when:
    - The API key is missing or rejected
    - The provider is unreachable or rate limits the request
    - The response is malformed, has the wrong vector count or dimension
    """

    def __init__(self, message: str, provider: str = None, status_code: int = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class CorruptionError(DocRAGError):
    """
    A stored embedding does not decode to the configured dimension.

    Fails the whole scan instead of skipping the record.
    """

    def __init__(
        self,
        message: str,
        record_id: int = None,
        byte_length: int = None,
        expected_length: int = None,
    ):
        super().__init__(message)
        self.record_id = record_id
        self.byte_length = byte_length
        self.expected_length = expected_length


class StoreError(DocRAGError):
    """
    Error in the vector store.

    Raised when:
    - The database file cannot be opened
    - Schema creation fails
    - An insert or scan fails at the database level
    """
    pass
