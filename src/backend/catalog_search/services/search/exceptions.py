"""Catalog search exceptions"""


class CatalogSearchError(Exception):
    """Base class for catalog search errors"""


class InvalidCriteriaError(CatalogSearchError, ValueError):
    """Criteria rejected before any collaborator is called"""

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid search criteria: {field}={value!r} ({reason})")


class SearchCancelledError(CatalogSearchError):
    """Caller cancelled the search; no partial result is returned"""


class CollaboratorUnavailableError(CatalogSearchError):
    """
    Search index or record store call failed.

    Raised and absorbed inside the reconciliation loop only.
    """

    def __init__(self, collaborator: str, cause: BaseException):
        self.collaborator = collaborator
        self.cause = cause
        super().__init__(f"{collaborator} unavailable: {cause}")
