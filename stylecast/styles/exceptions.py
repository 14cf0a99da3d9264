"""Exception hierarchy for style resolution and style mutations.

Read paths absorb StoreUnavailableError and MalformedFragmentError and fall
back to defaults. Write paths propagate everything, so an editing UI can show
InvalidMutationError as validation feedback.
"""


class StyleEngineError(Exception):
    """Base exception for all stylecast errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StoreUnavailableError(StyleEngineError):
    """Raised when a round-trip to the record store fails."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class MalformedFragmentError(StyleEngineError):
    """Raised when a fragment payload cannot be parsed or has the wrong shape."""

    def __init__(self, message: str, fragment_id: str | None = None) -> None:
        super().__init__(message)
        self.fragment_id = fragment_id


class InvalidMutationError(StyleEngineError):
    """Raised when a write violates a record constraint."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class FragmentNotFoundError(InvalidMutationError):
    """Raised when a write targets a fragment id that does not exist."""

    def __init__(self, fragment_id: str) -> None:
        super().__init__(f"Fragment not found: {fragment_id}", field="id")
        self.fragment_id = fragment_id
