"""Common test fixtures for emojify tests."""

import pytest
from PIL import Image

from emojify.models import DetectedFace, Expression


class FakeDetector:
    """Stands in for FaceDetector: fixed faces, records release."""

    def __init__(self, faces=None, error=None):
        self.faces = list(faces or [])
        self.error = error
        self.detect_calls = 0
        self.released = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.released = True

    def detect(self, image):
        self.detect_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.faces)


class SolidAssets:
    """Asset store returning one solid-colour square per expression."""

    def __init__(self, colors, size=(100, 100), failing=()):
        self.colors = colors
        self.size = size
        self.failing = set(failing)
        self.loaded = []

    def load(self, expression):
        self.loaded.append(expression)
        if expression in self.failing:
            raise FileNotFoundError(f"{expression.asset_name}.png")
        return Image.new("RGBA", self.size, self.colors.get(expression, (0, 255, 0, 255)))


def make_face(x=50.0, y=50.0, width=100.0, height=100.0, smiling=0.9, left=0.9, right=0.9):
    return DetectedFace(x=x, y=y, width=width, height=height,
                        smiling_probability=smiling,
                        left_eye_open_probability=left,
                        right_eye_open_probability=right)


@pytest.fixture
def blank_image():
    return Image.new("RGB", (400, 200), (0, 0, 0))


@pytest.fixture
def smile_face():
    return make_face(x=20, y=40, smiling=0.9, left=0.9, right=0.9)


@pytest.fixture
def frown_face():
    return make_face(x=260, y=40, smiling=0.1, left=0.9, right=0.9)


@pytest.fixture
def solid_assets():
    return SolidAssets({
        Expression.SMILE: (255, 0, 0, 255),
        Expression.FROWN: (0, 0, 255, 255),
    })


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep config env overrides from leaking into tests."""
    for name in ("CONFIG_PATH", "SMILING_THRESHOLD", "EYE_OPEN_THRESHOLD", "EMOJI_SCALE_FACTOR",
                 "EXACT_ASPECT", "MAX_FACES", "MIN_DETECTION_CONFIDENCE", "DETECTOR_BACKEND",
                 "EMOJI_ASSETS_DIR", "ASSETS_DIR", "EYE_CLOSED_RATIO", "EYE_OPEN_RATIO", "EMOJI_SIZE"):
        monkeypatch.delenv(name, raising=False)
