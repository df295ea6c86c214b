"""
kan exception hierarchy.

All domain exceptions live here to avoid circular imports. Every exception
carries a stable ``code`` for machine-readable output and the ``exit_code``
the CLI terminates with.
"""


class KanError(Exception):
    """Base class for kan errors."""

    code = "KAN_ERROR"
    exit_code = 1


class NotFound(KanError):
    """An entity, board or file is absent."""

    code = "NOT_FOUND"

    def __init__(self, resource: str, key: str, hint: str = ""):
        self.resource = resource
        self.key = key
        message = f"{resource} not found: {key}" if key else f"no {resource}s found"
        if hint:
            message = f"{message} ({hint})"
        super().__init__(message)


class Corrupt(KanError):
    """A file exists but does not decode into a valid record."""

    code = "CORRUPT"

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{reason} (file: {path})" if path else reason)


class UnsupportedVersion(KanError):
    """The stored schema is newer than this installation understands."""

    code = "UNSUPPORTED_VERSION"
    exit_code = 2

    def __init__(self, kind: str, path, found: int, supported: int, min_required: str):
        self.kind = kind
        self.path = str(path)
        self.found = found
        self.supported = supported
        self.min_required = min_required
        super().__init__(
            f"{kind} schema version {found} requires kan >= {min_required} "
            f"(file: {path}, supports up to: {supported})"
        )


class StaleReference(KanError):
    """Global config or board bookkeeping points at data that no longer exists."""

    code = "STALE_REFERENCE"

    def __init__(self, reference: str, missing):
        self.reference = reference
        self.missing = str(missing)
        super().__init__(f"stale global config entry: {reference} references {missing}, which does not exist")


class ValidationFailure(KanError):
    """A structural invariant would be violated."""

    code = "VALIDATION_FAILURE"

    def __init__(self, message: str, field: str = ""):
        self.field = field
        super().__init__(f"invalid {field}: {message}" if field else message)


class AmbiguousBoard(ValidationFailure):
    """Several boards exist and none could be chosen without asking."""

    code = "AMBIGUOUS_BOARD"


class FixFailed(KanError):
    """A doctor correction could not be applied."""

    code = "FIX_FAILED"
