from typing import Optional

from wordstack_app.core.error_handlers import NotFoundError, ValidationError, WordstackError


class EmptyInputError(ValidationError):
    """Raised when a review session is started without any items."""

    def __init__(self, message: str = 'A review session needs at least one item'):
        super().__init__(message)
        self.code = 'EMPTY_INPUT'


class SessionCompleteError(ValidationError):
    """Raised when review/skip is called on a session that already ended."""

    def __init__(self, message: str = 'Review session is already complete'):
        super().__init__(message)
        self.code = 'SESSION_COMPLETE'


class WordNotFoundError(NotFoundError):
    """Raised when an operation references an unknown vocabulary id."""

    def __init__(self, word_id: str):
        super().__init__(message=f'Vocabulary item {word_id!r} not found', resource=word_id)
        self.word_id = word_id


class PersistenceError(WordstackError):
    """Raised when the key-value backend fails to read or write."""

    def __init__(self, message: str, operation: str, key: Optional[str] = None):
        super().__init__(
            message=message,
            code='PERSISTENCE_ERROR',
            status_code=500,
            details={'operation': operation, 'key': key},
        )
        self.operation = operation
        self.key = key
