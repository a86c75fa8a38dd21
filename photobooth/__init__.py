"""Photo booth compositing pipeline: face-tracked decorations, filter effects and capture composition."""

from .booth import PhotoBooth
from .compositor import CaptureCompositor, CompositeResult, FrameAsset, build_export_filename
from .decorations import DECORATIONS, get_decoration
from .filters import FILTERS, get_filter
from .geometry import CanonicalFaceFrame, FaceDetection, FaceDetectionResult, LandmarkGeometryResolver
from .smoothing import SmoothingStore

__all__ = [
    "CanonicalFaceFrame",
    "CaptureCompositor",
    "CompositeResult",
    "DECORATIONS",
    "FILTERS",
    "FaceDetection",
    "FaceDetectionResult",
    "FrameAsset",
    "LandmarkGeometryResolver",
    "PhotoBooth",
    "SmoothingStore",
    "build_export_filename",
    "get_decoration",
    "get_filter",
]
