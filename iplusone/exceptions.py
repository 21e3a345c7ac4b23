"""Exception hierarchy for iplusone."""


class KnowledgeError(Exception):
    """Base exception for all iplusone errors."""


class StoreError(KnowledgeError):
    """Storage failure: connectivity, constraint violation, schema creation."""


class TokenizeError(KnowledgeError):
    """The morphological analyzer could not be run or its output could not be read."""
