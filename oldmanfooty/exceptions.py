"""Domain errors raised by the carnival services.

Messages are written to be shown to the user as they are.
"""


class CarnivalError(Exception):
    """Base exception for carnival business-rule failures."""
    pass


class CarnivalNotFoundError(CarnivalError):
    """Raised when a carnival id does not exist."""
    pass


class MissingIdentityFieldsError(CarnivalError):
    """Raised when a title or date needed for duplicate detection is absent."""

    def __init__(self, message: str = 'Carnival title and date are required for duplicate detection.'):
        super().__init__(message)


class DuplicateConflictError(CarnivalError):
    """Raised when the same club already has a manually entered carnival with this title and date."""

    def __init__(self, message: str = (
        'A similar manually created carnival already exists for this date. '
        'Please check for duplicates.'
    )):
        super().__init__(message)


class MergeNotAllowedError(CarnivalError):
    """Raised when an admin merge of two carnivals is not permitted."""
    pass


class ExternalSourceError(CarnivalError):
    """Raised when an external carnival source cannot be reached or parsed."""
    pass
