# Photo booth pipeline exceptions


class PhotoBoothError(Exception):
    """Base exception for compositing pipeline operations."""

    retryable: bool = False


class SourceNotReadyError(PhotoBoothError):
    """Raised when the camera frame has no usable pixels yet."""

    retryable = True

    def __init__(self, message: str = "Camera frame is not ready. Please try again."):
        super().__init__(message)


class CompositeError(PhotoBoothError):
    """Raised when any drawing step of a capture fails."""

    retryable = True

    def __init__(self, message: str = "Failed to compose the photo. Please try again.", layer: str = None):
        if layer:
            message = f"{message} (layer: {layer})"
        super().__init__(message)
        self.layer = layer


class UnknownDecorationError(PhotoBoothError):
    """Raised when a decoration id is not registered."""

    def __init__(self, decoration_id: str):
        super().__init__(f"Unknown decoration: {decoration_id}")
        self.decoration_id = decoration_id


class UnknownFilterError(PhotoBoothError):
    """Raised when a filter id is not registered."""

    def __init__(self, filter_id: str):
        super().__init__(f"Unknown filter: {filter_id}")
        self.filter_id = filter_id


class AssetLoadError(PhotoBoothError):
    """Raised when a frame asset cannot be decoded."""

    def __init__(self, source: str, reason: str = None):
        message = f"Failed to load asset: {source}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.source = source


class DetectionError(PhotoBoothError):
    """Raised by detector adapters when a single inference fails."""
