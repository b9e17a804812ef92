# emojify/core.py
import logging
from typing import Callable, Optional
from PIL import Image

from emojify.assets import EmojiAssets
from emojify.classifier import classify_face
from emojify.compositor import check_mode, overlay_emoji
from emojify.config import EmojifyConfig
from emojify.models import EmojifyResult, FaceResult, InvalidImageError

logger = logging.getLogger(__name__)

NO_FACE_MESSAGE = "No face detected"


def _log_notify(message: str) -> None:
    logger.warning(f"⚠️ {message}")


class Emojifier:
    """
    Detect -> classify -> composite pipeline:
      - the face detector is opened per call and released on every exit path
      - each face gets the emoji matching its expression, in detection order
      - a face that fails is logged and skipped, the others still get drawn
      - no faces: ``notify`` is called once and the input image is returned as is

    ``detector_factory`` returns a context manager exposing ``detect(image)``;
    the default builds a MediaPipe/DeepFace ``FaceDetector`` from the config.
    """

    def __init__(self, config: Optional[EmojifyConfig] = None,
                 detector_factory: Optional[Callable] = None,
                 assets: Optional[EmojiAssets] = None,
                 notify: Optional[Callable[[str], None]] = None):
        self.config = config or EmojifyConfig()
        self.detector_factory = detector_factory or self._default_detector
        self.assets = assets or EmojiAssets(self.config.assets_dir, self.config.emoji_size)
        self.notify = notify or _log_notify

    def _default_detector(self):
        # imported here so the heavy vision stack loads only when a detector is needed
        from emojify.detector import FaceDetector
        return FaceDetector.from_config(self.config)

    # ---------- pipeline ----------
    def analyze(self, picture: Image.Image) -> EmojifyResult:
        if picture is None or picture.width == 0 or picture.height == 0:
            raise InvalidImageError("Expected a non-empty image")
        check_mode(picture)

        with self.detector_factory() as detector:
            faces = detector.detect(picture)
            logger.info(f"🔍 Number of detected faces: {len(faces)}")

            if not faces:
                self.notify(NO_FACE_MESSAGE)
                return EmojifyResult(image=picture)

            result = picture
            face_results = []
            for idx, face in enumerate(faces):
                fr = FaceResult(index=idx, face=face)
                face_results.append(fr)
                try:
                    fr.expression = classify_face(face, self.config.thresholds)
                    logger.debug(
                        f"Face {idx}: smiling={face.smiling_probability:.3f} "
                        f"left_eye_open={face.left_eye_open_probability:.3f} "
                        f"right_eye_open={face.right_eye_open_probability:.3f} -> {fr.expression.name}")
                    emoji = self.assets.load(fr.expression)
                    result = overlay_emoji(result, emoji, face,
                                           scale_factor=self.config.emoji_scale_factor,
                                           exact_aspect=self.config.exact_aspect)
                except Exception as e:
                    logger.exception(f"❌ Skipping face {idx}: {e}")
                    fr.error = str(e)

        return EmojifyResult(image=result, faces=face_results)

    def detect_faces_and_overlay_emoji(self, picture: Image.Image) -> Image.Image:
        return self.analyze(picture).image
