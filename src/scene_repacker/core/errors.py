"""Exception types raised while repacking scene bundles.

Per-item problems (a requested name that does not exist, an external bundle
that cannot be resolved) are not raised to the caller; they are logged and
collected into the repacking summary. The exceptions in this module cover
conditions that make the output untrustworthy and therefore abort a run.
"""


class RepackError(Exception):
    """Base class for all repacking errors."""


class StructuralInconsistency(RepackError):
    """The package does not have the layout the repacker relies on.

    Raised for a missing descriptor object, a malformed reference field,
    a missing type schema, or a package without a main scene file.
    """


class TypeMismatch(StructuralInconsistency, TypeError):
    """A value-tree field is missing or holds a value of the wrong kind."""

    def __init__(self, path: str, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"Field '{path}': expected {expected}, got {actual}")


class ResolutionFailure(RepackError, LookupError):
    """A cab name could not be mapped to a bundle path."""

    def __init__(self, cab_name: str):
        self.cab_name = cab_name
        super().__init__(f"Unable to resolve cab name '{cab_name}'")


class SchemaValidationError(StructuralInconsistency, ValueError):
    """A package snapshot does not conform to its JSON Schema."""


class PackageIOError(RepackError, OSError):
    """A package could not be read from or written to disk."""
