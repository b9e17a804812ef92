# emojify/probabilities.py
import numpy as np


def eye_open_probability(aperture: float, closed_ratio: float, open_ratio: float) -> float:
    """Linear ramp: ``closed_ratio`` and below -> 0.0, ``open_ratio`` and above -> 1.0."""
    return float(np.clip((aperture - closed_ratio) / (open_ratio - closed_ratio), 0.0, 1.0))


def normalize_happy(value: float) -> float:
    """DeepFace reports emotions in percent on most versions, in [0, 1] on some."""
    value = float(value)
    return float(np.clip(value / 100.0 if value > 1.0 else value, 0.0, 1.0))
