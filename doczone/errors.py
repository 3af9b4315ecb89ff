"""Exception taxonomy for DocZone.

Only resource-limit violations are fatal. Empty zones, filtered lines and
synchronisation problems degrade to partial output and are reported as
warnings on the result objects instead of being raised.
"""

TOO_MANY_BLOCKS = "TOO_MANY_BLOCKS"
TOO_MANY_TOKENS = "TOO_MANY_TOKENS"


class DocZoneError(Exception):
    """Base class for DocZone errors."""

    pass


class DocumentTooLargeError(DocZoneError):
    """The document exceeds a configured size ceiling.

    Raised before any feature record is built. Not retried, not recovered.
    """

    def __init__(self, status: str, size: int, limit: int):
        self.status = status
        self.size = size
        self.limit = limit
        unit = "blocks" if status == TOO_MANY_BLOCKS else "tokens"
        super().__init__(
            f"The document has {size} {unit}, but the limit is {limit}"
        )


class LabelingError(DocZoneError):
    """A sequence labeler returned an output that does not line up with its input."""

    pass


class IngestError(DocZoneError):
    """The input document could not be read.

    Examples: missing file, unsupported extension, invalid JSON layout.
    """

    pass
