# emojify/compositor.py
import math
from dataclasses import dataclass
from typing import Tuple
from PIL import Image

from emojify.models import DetectedFace, InvalidImageError

EMOJI_SCALE_FACTOR = 1.2

# modes that survive an RGBA round trip
SUPPORTED_MODES = ("1", "L", "LA", "P", "RGB", "RGBA")


def _to_pixel(value: float) -> int:
    # half-pixel values always round up
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class EmojiPlacement:
    width: int
    height: int
    x: int
    y: int

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def position(self) -> Tuple[int, int]:
        return self.x, self.y


def emoji_placement(face: DetectedFace, emoji_size: Tuple[int, int],
                    scale_factor: float = EMOJI_SCALE_FACTOR,
                    exact_aspect: bool = False) -> EmojiPlacement:
    """
    Size and position of the emoji for one face.

    Width follows the face width times ``scale_factor``. By default the height
    uses the integer-floor aspect ratio (emoji_h // emoji_w) applied to the
    emoji's own height, plus one pixel; wide emojis therefore collapse to a
    1px strip. ``exact_aspect=True`` keeps the real aspect ratio instead.

    The emoji is centred horizontally on the face and raised so that its
    upper third sits above the face centre.
    """
    emoji_w, emoji_h = emoji_size
    new_w = max(int(face.width * scale_factor), 1)
    if exact_aspect:
        new_h = max(_to_pixel(new_w * emoji_h / emoji_w), 1)
    else:
        aspect_ratio = emoji_h // emoji_w
        new_h = int((emoji_h * aspect_ratio) * scale_factor) + 1

    cx, cy = face.center
    pos_x = _to_pixel(cx - new_w // 2)
    pos_y = _to_pixel(cy - new_h // 3)
    return EmojiPlacement(width=new_w, height=new_h, x=pos_x, y=pos_y)


def check_mode(image: Image.Image) -> None:
    if image.mode not in SUPPORTED_MODES:
        raise InvalidImageError(
            f"Unsupported image mode {image.mode!r}, expected one of {', '.join(SUPPORTED_MODES)}")


def overlay_emoji(background: Image.Image, emoji: Image.Image, face: DetectedFace,
                  scale_factor: float = EMOJI_SCALE_FACTOR,
                  exact_aspect: bool = False) -> Image.Image:
    """
    Return a new image: ``background`` with ``emoji`` drawn over ``face``.

    Drawing happens on an RGBA copy which is converted back to the
    background's mode; "P" images get a freshly quantised palette so the
    emoji colours survive. ``background`` is left untouched.
    """
    check_mode(background)
    canvas = background.convert("RGBA")

    place = emoji_placement(face, emoji.size, scale_factor, exact_aspect)
    scaled = emoji.convert("RGBA").resize(place.size, Image.NEAREST)

    # paste clips anything that falls outside the canvas
    canvas.paste(scaled, place.position, scaled)

    if background.mode == "RGBA":
        return canvas
    if background.mode == "P":
        return canvas.convert("RGB").quantize(colors=256, dither=Image.Dither.NONE)
    return canvas.convert(background.mode)
