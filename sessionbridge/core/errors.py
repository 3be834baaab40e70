"""Exception hierarchy for sessionbridge."""


class SessionBridgeError(Exception):
    """Base class for all sessionbridge errors"""
    pass


class ConfigurationError(SessionBridgeError):
    """Raised when a store or registry is configured inconsistently"""
    pass


class PersistenceError(SessionBridgeError):
    """Raised by the persistence layer for invalid requests"""
    pass


class UnknownManagerError(PersistenceError, LookupError):
    """Raised when a named persistence manager is not registered"""

    def __init__(self, name: str):
        super().__init__(f"No persistence manager registered as {name!r}")
        self.name = name


class UnknownDocumentError(PersistenceError, LookupError):
    """Raised when a document type does not map to a known model"""

    def __init__(self, document_type: str):
        super().__init__(f"Unknown document type {document_type!r}")
        self.document_type = document_type


class CriteriaError(PersistenceError, ValueError):
    """Raised when find/remove criteria reference unknown fields or operators"""
    pass
