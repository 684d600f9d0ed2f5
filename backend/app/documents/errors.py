"""Exception types for document generation.

Each failure kind callers can tell apart gets its own type. `public_message`
is what reaches the caller; the underlying cause stays in server logs.
"""


class DocumentGenerationError(Exception):
    """Base class for generation failures surfaced to the caller."""

    error_kind = "generation"
    public_message = "Failed to generate document"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.public_message)
        self.detail = detail


class InputValidationError(DocumentGenerationError):
    """Request payload rejected before any storage access."""

    error_kind = "input_validation"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        # Validation details are safe and useful for the caller
        self.public_message = detail


class ClientNotFoundError(DocumentGenerationError):
    """Client id does not exist or is not visible to the caller."""

    error_kind = "client_not_found"
    public_message = "Client not found"


class AssetDecodeError(Exception):
    """Logo bytes could not be decoded. Recovered locally as "no logo"."""

    pass


class EncodingError(DocumentGenerationError):
    """Building or serializing the DOCX package failed."""

    error_kind = "encoding"
    public_message = "Failed to build document"


class PersistenceError(DocumentGenerationError):
    """Artifact or history write failed."""

    error_kind = "persistence"
    public_message = "Failed to save document"
