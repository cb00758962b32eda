class ManifestError(Exception):
    """Base exception for manifest construction errors."""


class ParseError(ManifestError):
    """Raised when reading cluster specs from YAML fails fatally."""


class ConfigSerializationError(ManifestError):
    """Raised when the structured server config cannot be rendered to JSON."""


class PersistenceError(ManifestError):
    """Raised by apply clients when writing an object to the platform fails."""


class UpdateConflictError(PersistenceError):
    """Raised by apply clients when the stored object changed underneath the write."""
