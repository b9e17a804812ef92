# emojify/models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
from PIL import Image
from pydantic import BaseModel


class EmojifyError(Exception):
    """Base error for the emojify pipeline."""


class InvalidImageError(EmojifyError, ValueError):
    pass


class InvalidFaceError(EmojifyError, ValueError):
    pass


class Expression(str, Enum):
    """Facial expression; the value is the emoji asset name."""

    SMILE = "smile"
    FROWN = "frown"
    LEFT_WINK = "leftwink"
    RIGHT_WINK = "rightwink"
    LEFT_WINK_FROWN = "leftwinkfrown"
    RIGHT_WINK_FROWN = "rightwinkfrown"
    CLOSED_EYE_SMILE = "closed_smile"
    CLOSED_EYE_FROWN = "closed_frown"

    @property
    def asset_name(self) -> str:
        return self.value


@dataclass(frozen=True)
class DetectedFace:
    """One face from a single detection pass: pixel bounding box + classification probabilities."""
    x: float
    y: float
    width: float
    height: float
    smiling_probability: float
    left_eye_open_probability: float
    right_eye_open_probability: float

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise InvalidFaceError(f"Face box must have positive size, got {self.width}x{self.height}")
        for name in ("smiling_probability", "left_eye_open_probability", "right_eye_open_probability"):
            p = getattr(self, name)
            if not 0.0 <= p <= 1.0:
                raise InvalidFaceError(f"{name} must be within [0, 1], got {p}")

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2


@dataclass
class FaceResult:
    index: int
    face: DetectedFace
    expression: Optional[Expression] = None
    error: Optional[str] = None


@dataclass
class EmojifyResult:
    image: Image.Image
    faces: List[FaceResult] = field(default_factory=list)

    @property
    def face_count(self) -> int:
        return len(self.faces)


class FaceResponse(BaseModel):
    x: float
    y: float
    width: float
    height: float
    smiling_probability: float
    left_eye_open_probability: float
    right_eye_open_probability: float
    expression: Optional[str]
    error: Optional[str] = None


class AnalyzeResponse(BaseModel):
    timestamp_utc: str
    image_filename: str
    image_width: int
    image_height: int
    face_count: int
    faces: List[FaceResponse]
