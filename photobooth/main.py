from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, List, Optional

import cv2
import numpy as np
from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .booth import PhotoBooth
from .compositor import FrameAsset, build_export_filename
from .config import Settings, get_settings
from .decorations import list_decorations
from .detector import FaceDetector, LazyFaceDetector, MediaPipeFaceDetector, StaticDetector
from .exceptions import (
    AssetLoadError,
    CompositeError,
    DetectionError,
    SourceNotReadyError,
    UnknownDecorationError,
    UnknownFilterError,
)
from .filters import list_filters
from .frames import list_frame_styles
from .geometry import FaceDetection, FaceDetectionResult, NormalizedBox
from .models import (
    BoxModel,
    CaptureConfig,
    CaptureResponse,
    DecorationInfo,
    DetectionModel,
    DetectResponse,
    FaceLandmark,
    FilterInfo,
    FrameInfo,
)
from .tracking import StillFrameSource

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Photo Booth Backend", version="1.0.0")
settings = get_settings()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_detector() -> FaceDetector:
    return LazyFaceDetector(lambda: MediaPipeFaceDetector.from_settings(get_settings()))


@app.get("/health")
async def health() -> dict[str, Any]:
    return {"status": "ok"}


@app.get("/api/decorations", response_model=List[DecorationInfo])
async def decorations() -> List[DecorationInfo]:
    return [DecorationInfo(id=d.id, name=d.name, category=d.category.value) for d in list_decorations()]


@app.get("/api/filters", response_model=List[FilterInfo])
async def filters() -> List[FilterInfo]:
    return [FilterInfo(id=f.id, name=f.name, css=f.css, hasPixelPass=f.has_pixel_pass) for f in list_filters()]


@app.get("/api/frames", response_model=List[FrameInfo])
async def frames() -> List[FrameInfo]:
    return [FrameInfo(id=s.id, name=s.name) for s in list_frame_styles()]


async def _load_image(upload: UploadFile) -> np.ndarray:
    """Load image from UploadFile and convert to numpy array."""
    try:
        data = await upload.read()
        if not data:
            raise HTTPException(status_code=400, detail="Empty image payload")
        array = np.frombuffer(data, np.uint8)
        image = cv2.imdecode(array, cv2.IMREAD_COLOR)
        if image is None:
            raise HTTPException(status_code=400, detail="Unsupported image format")
        return image
    except HTTPException:
        raise
    except Exception as exc:
        logger.error(f"Error loading image: {exc}", exc_info=True)
        raise HTTPException(status_code=400, detail=f"Failed to load image: {str(exc)}") from exc


def _to_result(models: List[DetectionModel]) -> FaceDetectionResult:
    return FaceDetectionResult(
        tuple(
            FaceDetection(
                box=NormalizedBox(m.box.xCenter, m.box.yCenter, m.box.width, m.box.height),
                landmarks=tuple((lm.x, lm.y) for lm in m.landmarks),
                score=m.score,
            )
            for m in models
        )
    )


def _to_models(result: FaceDetectionResult) -> List[DetectionModel]:
    return [
        DetectionModel(
            box=BoxModel(xCenter=d.box.x_center, yCenter=d.box.y_center, width=d.box.width, height=d.box.height),
            landmarks=[FaceLandmark(x=x, y=y) for x, y in d.landmarks],
            score=min(max(d.score, 0.0), 1.0),
        )
        for d in result.detections
    ]


@app.post("/api/detect", response_model=DetectResponse)
async def detect_faces(
    image: UploadFile = File(...),
    detector: FaceDetector = Depends(get_detector),
) -> DetectResponse:
    """Run face detection and return normalized boxes and keypoints."""
    try:
        img = await _load_image(image)
        result = await detector.detect(img)
        return DetectResponse(width=img.shape[1], height=img.shape[0], detections=_to_models(result))
    except HTTPException:
        raise
    except DetectionError as exc:
        logger.error(f"Face detection failed: {exc}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"Error detecting faces: {exc}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error detecting faces: {str(exc)}") from exc


@app.post("/api/capture", response_model=CaptureResponse)
async def capture(
    image: UploadFile = File(...),
    frame: Optional[UploadFile] = File(None),
    captureConfig: Optional[str] = Form(None),
    detector: FaceDetector = Depends(get_detector),
    app_settings: Settings = Depends(get_settings),
) -> CaptureResponse:
    """Composite one still: effect, decoration, frame and caption."""
    try:
        config = CaptureConfig.model_validate_json(captureConfig) if captureConfig else CaptureConfig()
    except json.JSONDecodeError as exc:
        logger.error(f"Invalid captureConfig JSON: {exc}")
        raise HTTPException(status_code=400, detail=f"Invalid captureConfig JSON: {exc}") from exc
    except ValidationError as exc:
        logger.error(f"Invalid captureConfig validation: {exc}")
        raise HTTPException(status_code=400, detail=f"Invalid captureConfig: {exc.errors()}") from exc

    if config.detections is not None:
        detector = StaticDetector(_to_result(config.detections))

    img = await _load_image(image)
    booth = PhotoBooth(detector, StillFrameSource(img, config.userFacing), settings=app_settings)
    try:
        booth.tracker.select(config.decoration)
        booth.select_filter(config.filter)
        booth.select_frame(config.frame)
        if frame is not None:
            data = await frame.read()
            if data:
                booth.set_frame_asset(FrameAsset.from_bytes(data, frame.filename or "upload"))
        booth.message = config.message
    except (UnknownDecorationError, UnknownFilterError, AssetLoadError) as exc:
        booth.close()
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        result = await booth.capture_still()
        fmt = config.format or app_settings.output_format
        return CaptureResponse(
            image=result.to_data_url(fmt, app_settings.jpeg_quality),
            width=result.width,
            height=result.height,
            filename=build_export_filename(app_settings.export_prefix, config.label, ext=fmt),
            captionLines=list(result.caption_lines),
            faceCount=booth.tracker.face_count,
        )
    except HTTPException:
        raise
    except SourceNotReadyError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except CompositeError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"Error composing capture: {exc}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error composing capture: {str(exc)}") from exc
    finally:
        booth.close()
