# emojify/classifier.py
from dataclasses import dataclass

from emojify.models import DetectedFace, Expression

SMILING_PROBABILITY_THRESHOLD = 0.654  # tuned on sample photos
EYE_OPEN_PROBABILITY_THRESHOLD = 0.454  # tuned on sample photos


@dataclass(frozen=True)
class Thresholds:
    smiling: float = SMILING_PROBABILITY_THRESHOLD
    eye_open: float = EYE_OPEN_PROBABILITY_THRESHOLD


# (smiling, left eye open, right eye open) -> expression
EXPRESSION_TABLE: dict[tuple[bool, bool, bool], Expression] = {
    (True, True, True): Expression.SMILE,
    (True, True, False): Expression.RIGHT_WINK,
    (True, False, True): Expression.LEFT_WINK,
    (True, False, False): Expression.CLOSED_EYE_SMILE,
    (False, True, True): Expression.FROWN,
    (False, True, False): Expression.LEFT_WINK_FROWN,
    (False, False, True): Expression.RIGHT_WINK_FROWN,
    (False, False, False): Expression.CLOSED_EYE_FROWN,
}

# inverse lookup, used to draw the built-in emoji set
EXPRESSION_STATES: dict[Expression, tuple[bool, bool, bool]] = {v: k for k, v in EXPRESSION_TABLE.items()}


def is_smiling(smiling_prob: float, thresholds: Thresholds = Thresholds()) -> bool:
    return smiling_prob >= thresholds.smiling


def is_eye_open(eye_open_prob: float, thresholds: Thresholds = Thresholds()) -> bool:
    return eye_open_prob >= thresholds.eye_open


def classify(smiling_prob: float, left_eye_open_prob: float, right_eye_open_prob: float,
             thresholds: Thresholds = Thresholds()) -> Expression:
    """Map the three classification probabilities to an expression. Always returns one."""
    key = (
        is_smiling(smiling_prob, thresholds),
        is_eye_open(left_eye_open_prob, thresholds),
        is_eye_open(right_eye_open_prob, thresholds),
    )
    return EXPRESSION_TABLE[key]


def classify_face(face: DetectedFace, thresholds: Thresholds = Thresholds()) -> Expression:
    return classify(face.smiling_probability,
                    face.left_eye_open_probability,
                    face.right_eye_open_probability,
                    thresholds)
