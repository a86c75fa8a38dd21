from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class MessageField(BaseModel):
    enabled: bool = False
    value: str = ""

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.value.strip())


class MessageConfig(BaseModel):
    date: MessageField = MessageField()
    text: MessageField = MessageField()
    location: MessageField = MessageField()


class FaceLandmark(BaseModel):
    x: float
    y: float


class BoxModel(BaseModel):
    xCenter: float
    yCenter: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class DetectionModel(BaseModel):
    box: BoxModel
    landmarks: List[FaceLandmark] = Field(default_factory=list)
    score: float = Field(default=1.0, ge=0, le=1)


class CaptureConfig(BaseModel):
    filter: str = "none"
    decoration: str = "none"
    frame: Optional[str] = None  # built-in frame style id
    userFacing: bool = True
    message: MessageConfig = MessageConfig()
    detections: Optional[List[DetectionModel]] = None  # skips server-side detection when set
    label: str = ""
    format: Optional[Literal["jpeg", "png"]] = None


class DetectResponse(BaseModel):
    width: int
    height: int
    detections: List[DetectionModel] = Field(default_factory=list)


class CaptureResponse(BaseModel):
    image: str
    width: int
    height: int
    filename: str
    captionLines: List[str] = Field(default_factory=list)
    faceCount: int = 0


class DecorationInfo(BaseModel):
    id: str
    name: str
    category: str


class FilterInfo(BaseModel):
    id: str
    name: str
    css: str
    hasPixelPass: bool = False


class FrameInfo(BaseModel):
    id: str
    name: str
