class StripCreationError(Exception):
    """Base error for anything that prevents a strip from being produced."""


class InvalidFrameCount(StripCreationError, ValueError):
    def __init__(self, count):
        super().__init__(f"Frame count must be 2, 3 or 4 (got {count!r})")
        self.count = count


class StripConfigError(StripCreationError, ValueError):
    pass


class ImageDecodeError(StripCreationError):
    pass


class UploadCountError(StripCreationError):
    pass


class MissingLogoError(StripCreationError):
    """Raised by the export policy; the compositor itself renders without a logo."""
