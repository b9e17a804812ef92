# emojify/detector.py
import logging
import math
from typing import List, Tuple

import cv2
import mediapipe as mp
import numpy as np
from deepface import DeepFace
from PIL import Image

from emojify.models import DetectedFace, InvalidImageError
from emojify.probabilities import eye_open_probability, normalize_happy

logger = logging.getLogger(__name__)


class FaceDetector:
    """
    MediaPipe FaceMesh + DeepFace face detector:
      - face box from the mesh landmarks
      - eye-open probability per eye from the eye aperture (lid gap / eye width)
      - smiling probability from DeepFace's "happy" score on the face crop

    Single-shot (no tracking across frames). Use as a context manager, or call
    ``release()`` when done.
    """

    # Landmark indices (up, low, inner corner, outer corner), subject's left/right
    _L_UP, _L_LOW, _L_IN, _L_OUT = 386, 374, 362, 263
    _R_UP, _R_LOW, _R_IN, _R_OUT = 159, 145, 133, 33

    def __init__(self, max_faces: int = 10, min_detection_confidence: float = 0.5,
                 detector_backend: str = "skip", eye_closed_ratio: float = 0.12,
                 eye_open_ratio: float = 0.28):
        self.detector_backend = detector_backend
        self.eye_closed_ratio = eye_closed_ratio
        self.eye_open_ratio = eye_open_ratio
        self._mesh = mp.solutions.face_mesh.FaceMesh(static_image_mode=True,
                                                    max_num_faces=max_faces,
                                                    refine_landmarks=True,
                                                    min_detection_confidence=min_detection_confidence)

    @classmethod
    def from_config(cls, config) -> "FaceDetector":
        return cls(max_faces=config.max_faces,
                   min_detection_confidence=config.min_detection_confidence,
                   detector_backend=config.detector_backend,
                   eye_closed_ratio=config.eye_closed_ratio,
                   eye_open_ratio=config.eye_open_ratio)

    def __enter__(self) -> "FaceDetector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def release(self) -> None:
        if self._mesh is not None:
            self._mesh.close()
            self._mesh = None
            logger.debug("Face detector released")

    # ---------- measurements ----------
    @staticmethod
    def _dist(p1, p2) -> float:
        return math.dist(p1, p2)

    def _compute_eye_aperture_ratios(self, landmarks, w: int, h: int) -> Tuple[float, float]:
        def px(idx): return (landmarks[idx].x * w, landmarks[idx].y * h)
        l_up, l_low, l_in, l_out = px(self._L_UP), px(self._L_LOW), px(self._L_IN), px(self._L_OUT)
        r_up, r_low, r_in, r_out = px(self._R_UP), px(self._R_LOW), px(self._R_IN), px(self._R_OUT)
        left_width = self._dist(l_in, l_out) + 1e-6
        right_width = self._dist(r_in, r_out) + 1e-6
        left_ap = self._dist(l_up, l_low) / left_width
        right_ap = self._dist(r_up, r_low) / right_width
        return left_ap, right_ap

    @staticmethod
    def _bounding_box(landmarks, w: int, h: int) -> Tuple[float, float, float, float]:
        xs = [lm.x * w for lm in landmarks]
        ys = [lm.y * h for lm in landmarks]
        x0, x1 = max(min(xs), 0.0), min(max(xs), float(w))
        y0, y1 = max(min(ys), 0.0), min(max(ys), float(h))
        return x0, y0, max(x1 - x0, 1.0), max(y1 - y0, 1.0)

    # ---------- deepface ----------
    def happy_probability(self, face_bgr: np.ndarray) -> float:
        """Return happiness probability in [0,1], tolerant to API changes."""
        try:
            out = DeepFace.analyze(
                img_path=face_bgr,
                actions=["emotion"],
                detector_backend=self.detector_backend,
                enforce_detection=False
            )
        except TypeError:
            out = DeepFace.analyze(img_path=face_bgr, actions=["emotion"])
        except Exception:
            out = DeepFace.analyze(img_path=face_bgr, actions=["emotion"], detector_backend="opencv", enforce_detection=False)

        res = out[0] if isinstance(out, list) else out
        emo = res.get("emotion") or res.get("emotions") or {}
        return normalize_happy(emo.get("happy", 0.0))

    # ---------- detection ----------
    def detect(self, picture: Image.Image) -> List[DetectedFace]:
        if self._mesh is None:
            raise RuntimeError("Face detector has been released")
        if picture is None or picture.width == 0 or picture.height == 0:
            raise InvalidImageError("Cannot detect faces in an empty image")

        img_rgb = np.array(picture.convert("RGB"))
        img_bgr = cv2.cvtColor(img_rgb, cv2.COLOR_RGB2BGR)
        h, w = img_rgb.shape[:2]

        res = self._mesh.process(img_rgb)
        if not res.multi_face_landmarks:
            return []

        faces = []
        for idx, mesh in enumerate(res.multi_face_landmarks):
            try:
                faces.append(self._measure_face(mesh.landmark, img_bgr, w, h))
            except Exception as e:
                logger.exception(f"❌ Skipping face {idx}: {e}")
        return faces

    def _measure_face(self, lm, img_bgr: np.ndarray, w: int, h: int) -> DetectedFace:
        x, y, bw, bh = self._bounding_box(lm, w, h)
        left_ap, right_ap = self._compute_eye_aperture_ratios(lm, w, h)
        crop = img_bgr[int(y):int(math.ceil(y + bh)), int(x):int(math.ceil(x + bw))]
        if crop.size == 0:
            crop = img_bgr
        return DetectedFace(
            x=x, y=y, width=bw, height=bh,
            smiling_probability=self.happy_probability(crop),
            left_eye_open_probability=eye_open_probability(left_ap, self.eye_closed_ratio, self.eye_open_ratio),
            right_eye_open_probability=eye_open_probability(right_ap, self.eye_closed_ratio, self.eye_open_ratio),
        )
