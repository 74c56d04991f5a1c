"""
persistbase Errors

Exceptions raised to callers. Soft conditions (persistence switched off,
incompatible store, missing tables, unreachable store) never raise; they
degrade to fallbacks instead.
"""


class PersistenceError(Exception):
    """Base exception for persistence errors"""
    pass


class PersistenceUnavailableError(PersistenceError):
    """Raised when a caller requires the database but it cannot be used"""
    pass


class SerializationError(PersistenceError, ValueError):
    """Raised when a value cannot be frozen for storage"""
    pass
