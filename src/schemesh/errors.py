"""Exception hierarchy for schematic loading."""


class SchematicError(Exception):
    """Base class for all schematic loading errors."""

    pass


class FormatError(SchematicError):
    """Raised by a decoder when the container is not in its format."""

    pass


class UnknownFormatError(SchematicError):
    """Raised when no decoder recognizes the container."""

    def __init__(self, tried=None):
        self.tried = list(tried or [])
        detail = f" (tried: {', '.join(self.tried)})" if self.tried else ""
        super().__init__(f"Unknown schematic format{detail}")


class GridTooLargeError(SchematicError):
    """Raised when a declared grid volume exceeds the configured limit."""

    def __init__(self, volume: int, limit: int):
        self.volume = volume
        self.limit = limit
        super().__init__(f"Grid volume {volume} exceeds limit {limit}")
