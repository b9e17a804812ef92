# emojify/assets.py
import logging
import os
from typing import Dict, Optional
from PIL import Image, ImageDraw

from emojify.classifier import EXPRESSION_STATES
from emojify.models import Expression

logger = logging.getLogger(__name__)

_FACE_FILL = (255, 204, 77, 255)
_FACE_OUTLINE = (214, 150, 30, 255)
_FEATURE = (70, 45, 20, 255)


def render_emoji(expression: Expression, size: int = 256) -> Image.Image:
    """Draw the built-in emoji for ``expression`` on a transparent square."""
    smiling, left_open, right_open = EXPRESSION_STATES[expression]
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    line = max(size // 32, 1)

    draw.ellipse((line, line, size - line - 1, size - line - 1),
                 fill=_FACE_FILL, outline=_FACE_OUTLINE, width=line)

    # the subject's right eye is on the viewer's left
    eye_y = int(size * 0.38)
    eye_r = max(size // 14, 1)
    for eye_x, is_open in ((int(size * 0.35), right_open), (int(size * 0.65), left_open)):
        box = (eye_x - eye_r, eye_y - eye_r, eye_x + eye_r, eye_y + eye_r)
        if is_open:
            draw.ellipse(box, fill=_FEATURE)
        else:
            draw.arc(box, start=200, end=340, fill=_FEATURE, width=line * 2)

    mouth_w = size * 0.5
    if smiling:
        box = (size / 2 - mouth_w / 2, size * 0.40, size / 2 + mouth_w / 2, size * 0.78)
        draw.arc(box, start=20, end=160, fill=_FEATURE, width=line * 2)
    else:
        box = (size / 2 - mouth_w / 2, size * 0.66, size / 2 + mouth_w / 2, size * 0.95)
        draw.arc(box, start=200, end=340, fill=_FEATURE, width=line * 2)
    return img


class EmojiAssets:
    """
    Expression -> emoji image store.

    With ``assets_dir`` set, images are read from ``<assets_dir>/<asset_name>.png``;
    otherwise the built-in set is drawn at ``size`` pixels. Loaded images are
    cached, callers get copies.
    """

    def __init__(self, assets_dir: Optional[str] = None, size: int = 256):
        self.assets_dir = assets_dir
        self.size = size
        self._cache: Dict[Expression, Image.Image] = {}

    def path_for(self, expression: Expression) -> Optional[str]:
        if not self.assets_dir:
            return None
        return os.path.join(self.assets_dir, f"{expression.asset_name}.png")

    def load(self, expression: Expression) -> Image.Image:
        if expression not in self._cache:
            path = self.path_for(expression)
            if path is None:
                self._cache[expression] = render_emoji(expression, self.size)
            else:
                logger.debug(f"Loading emoji asset {path}")
                with Image.open(path) as im:
                    self._cache[expression] = im.convert("RGBA")
        return self._cache[expression].copy()

    def clear(self) -> None:
        self._cache = {}
