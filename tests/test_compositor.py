import pytest
from PIL import Image

from emojify.compositor import emoji_placement, overlay_emoji
from emojify.models import InvalidImageError

from conftest import make_face

RED = (255, 0, 0, 255)


def test_wide_emoji_collapses_to_one_pixel_height():
    face = make_face(x=50, y=50, width=200, height=200)
    place = emoji_placement(face, (100, 50), scale_factor=1.2)
    assert place.size == (240, 1)
    assert place.position == (30, 150)


def test_square_emoji_height_follows_emoji_not_face():
    face = make_face(x=0, y=0, width=100, height=100)
    place = emoji_placement(face, (100, 100))
    assert place.size == (120, 121)
    # 50 - 120 // 2, 50 - 121 // 3
    assert place.position == (-10, 10)


def test_exact_aspect_keeps_ratio():
    face = make_face(x=50, y=50, width=200, height=200)
    place = emoji_placement(face, (100, 50), exact_aspect=True)
    assert place.size == (240, 120)
    assert place.position == (30, 110)


def test_overlay_keeps_size_and_mode():
    bg = Image.new("RGB", (320, 240), (10, 20, 30))
    out = overlay_emoji(bg, Image.new("RGBA", (64, 64), RED), make_face())
    assert out.size == bg.size
    assert out.mode == bg.mode


def test_overlay_does_not_mutate_background():
    bg = Image.new("RGB", (320, 240), (10, 20, 30))
    snapshot = bg.tobytes()
    out = overlay_emoji(bg, Image.new("RGBA", (64, 64), RED), make_face())
    assert out is not bg
    assert bg.tobytes() == snapshot
    assert out.tobytes() != snapshot


def test_one_pixel_strip_is_drawn_where_expected():
    bg = Image.new("RGB", (400, 400), (0, 0, 0))
    face = make_face(x=50, y=50, width=200, height=200)
    out = overlay_emoji(bg, Image.new("RGBA", (100, 50), RED), face)
    assert out.getpixel((30, 150)) == (255, 0, 0)
    assert out.getpixel((269, 150)) == (255, 0, 0)
    assert out.getpixel((29, 150)) == (0, 0, 0)
    assert out.getpixel((270, 150)) == (0, 0, 0)
    assert out.getpixel((100, 149)) == (0, 0, 0)
    assert out.getpixel((100, 151)) == (0, 0, 0)


def test_out_of_bounds_emoji_is_clipped():
    bg = Image.new("RGB", (100, 100), (0, 0, 0))
    face = make_face(x=-40, y=-40, width=60, height=60)
    out = overlay_emoji(bg, Image.new("RGBA", (50, 50), RED), face)
    assert out.size == (100, 100)
    assert out.getpixel((0, 0)) == (255, 0, 0)
    assert out.getpixel((99, 99)) == (0, 0, 0)


def test_transparent_emoji_pixels_keep_background():
    bg = Image.new("RGB", (200, 200), (0, 128, 0))
    emoji = Image.new("RGBA", (50, 50), (0, 0, 0, 0))
    out = overlay_emoji(bg, emoji, make_face(x=50, y=50, width=100, height=100))
    assert out.tobytes() == bg.tobytes()


def test_grayscale_background_stays_grayscale():
    bg = Image.new("L", (200, 200), 0)
    out = overlay_emoji(bg, Image.new("RGBA", (50, 50), (255, 255, 255, 255)), make_face())
    assert out.mode == "L"
    assert out.getpixel((100, 100)) == 255


def test_palette_background_keeps_emoji_colours():
    bg = Image.new("RGB", (200, 200), (0, 0, 0)).quantize(4)
    out = overlay_emoji(bg, Image.new("RGBA", (50, 50), RED), make_face(x=50, y=50, width=100, height=100))
    assert out.mode == "P"
    assert out.size == bg.size
    rgb = out.convert("RGB")
    assert rgb.getpixel((100, 100)) == (255, 0, 0)
    assert rgb.getpixel((5, 5)) == (0, 0, 0)


def test_rgba_background_stays_rgba():
    bg = Image.new("RGBA", (200, 200), (0, 0, 0, 255))
    out = overlay_emoji(bg, Image.new("RGBA", (50, 50), RED), make_face())
    assert out.mode == "RGBA"
    assert out.getpixel((100, 100)) == (255, 0, 0, 255)


@pytest.mark.parametrize("mode", ["I;16", "I", "F", "CMYK"])
def test_unsupported_mode_is_rejected(mode):
    bg = Image.new(mode, (100, 100))
    with pytest.raises(InvalidImageError, match="Unsupported image mode"):
        overlay_emoji(bg, Image.new("RGBA", (50, 50), (255, 255, 255, 255)), make_face(x=0, y=0, width=50, height=50))


def test_half_pixel_positions_round_up_consistently():
    # odd face widths put the centre on a half pixel
    for x in (10, 11, 12, 13):
        face = make_face(x=x, y=0, width=101, height=100)
        place = emoji_placement(face, (100, 100), scale_factor=1.0)
        # centre x + 50.5 minus 101 // 2
        assert place.x == x + 1
