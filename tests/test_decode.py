import json

import pytest
from PIL import Image

from lightloop.errors import PatternError
from lightloop.frame import BLACK, Color, FrameBuffer
from lightloop.patterns import (
    REGISTRY, Cycle, Rainbow, SolidColor, Transition, decode_pattern, load_pattern, loads_pattern,
)


def render(pattern, n=3, t=0):
    frame = FrameBuffer(n)
    pattern.render(frame, t)
    return frame


def test_registry_lists_builtin_types():
    assert {"SolidColor", "Frame", "Rainbow", "Gradient", "Repeated", "Rotate",
            "Cycle", "Transition", "Breathe", "Image"} <= set(REGISTRY)


def test_hex_string_is_solid_color():
    p = loads_pattern('"#0101ff"')
    assert isinstance(p, SolidColor)
    assert render(p)[:] == [Color(1, 1, 255)] * 3


def test_type_name_string_uses_defaults():
    p = decode_pattern("Rainbow")
    assert isinstance(p, Rainbow)
    assert p.speed == 0.0


def test_object_with_parameters():
    p = decode_pattern({"_type": "Rainbow", "speed": 0.5, "value": 0.25})
    assert p.speed == 0.5
    assert p.value == 0.25


def test_nested_children():
    doc = {
        "_type": "Transition",
        "before": {"_type": "Cycle", "children": ["#ff0000", "#00ff00"], "duration_ms": 100},
        "after": {"_type": "Frame", "colors": ["#0000ff"]},
        "offset_ms": 1000,
        "duration_ms": 500,
    }
    p = loads_pattern(json.dumps(doc))
    assert isinstance(p, Transition)
    assert isinstance(p.before, Cycle)
    assert render(p, 2, 150)[:] == [Color(0, 255, 0)] * 2
    assert render(p, 2, 2000)[:] == [Color(0, 0, 255), BLACK]


def test_integers_accepted_as_numbers():
    assert decode_pattern({"_type": "Rotate", "child": "#ffffff", "pixels_per_second": 3}).pixels_per_second == 3.0


@pytest.mark.parametrize("doc, message", [
    ('"Sparkles"', "unknown pattern type 'Sparkles'"),
    ('{"speed": 1}', "_type"),
    ('{"_type": "SolidColor", "color": "#12"}', "color"),
    ('{"_type": "SolidColor", "colour": "#ff0000"}', "SolidColor"),
    ('{"_type": "Gradient", "left": "#ff0000"}', "Gradient"),
    ('{"_type": "Repeated", "child": "#ff0000", "every": "2"}', "every: expected an integer"),
    ('{"_type": "Repeated", "child": "#ff0000", "every": 2.5}', "every: expected an integer"),
    ('{"_type": "Rainbow", "speed": true}', "speed: expected a number"),
    ('{"_type": "Cycle", "children": "#ff0000"}', "children: expected a list"),
    ('{"_type": "Cycle", "children": ["#ff0000", 7]}', "children[1]"),
    ('{"_type": "Frame", "colors": ["#ff0000", "red"]}', "colors[1]"),
    ('{"_type": "Rotate", "child": "#ff0000", "pixels_per_second": NaN}', "pixels_per_second: expected a finite number"),
    ('{"_type": "Rotate", "child": "#ff0000", "pixels_per_second": Infinity}', "pixels_per_second: expected a finite number"),
    ('{"_type": "Rainbow", "speed": -Infinity}', "speed: expected a finite number"),
    ('{"_type": "Breathe", "child": "#ff0000", "floor": 1e400}', "floor: expected a finite number"),
    ('{"_type": "Rainbow", "value": ' + "9" * 400 + '}', "value: expected a finite number"),
    ('{"_type": "SolidColor", "color": {"h": 0.5, "s": 1}}', "color: an HSV color needs"),
    ('{"_type": "SolidColor", "color": {"h": 0.5, "s": 2, "v": 1}}', "between 0 and 1"),
    ('{"_type": "SolidColor", "color": {"h": NaN, "s": 1, "v": 1}}', "color.h: expected a finite number"),
    ('42', "expected a pattern"),
    ('{"_type": "Rainbow",', "invalid pattern JSON"),
])
def test_malformed_documents(doc, message):
    with pytest.raises(PatternError) as ei:
        loads_pattern(doc)
    assert message in str(ei.value)


def test_hsv_colors():
    p = loads_pattern('{"_type": "Gradient", "left": {"h": 0, "s": 1, "v": 1}, "right": {"h": 0.5, "s": 0, "v": 0}}')
    assert render(p)[:] == [Color(255, 0, 0), Color(128, 0, 0), BLACK]


def test_huge_finite_rate_still_renders():
    p = loads_pattern('{"_type": "Rotate", "child": {"_type": "Frame", "colors": ["#ff0000"]}, "pixels_per_second": 1e308}')
    for t in (0, 1000, 2**32 - 1):
        frame = render(p, 4, t)
        assert sorted(frame[:]) == [BLACK, BLACK, BLACK, Color(255, 0, 0)]


def test_load_pattern_file(tmp_path):
    path = tmp_path / "anim.json"
    path.write_text('{"_type": "Gradient", "left": "#000000", "right": "#c86400"}')
    assert render(load_pattern(path))[1] == Color(100, 50, 0)


def test_load_pattern_missing_file(tmp_path):
    with pytest.raises(PatternError) as ei:
        load_pattern(tmp_path / "nope.json")
    assert "can't read pattern file" in str(ei.value)


def test_image_path_relative_to_pattern_file(tmp_path):
    Image.new("RGB", (2, 1), (10, 20, 30)).save(tmp_path / "strip.png")
    path = tmp_path / "anim.json"
    path.write_text('{"_type": "Image", "path": "strip.png", "row_ms": 20}')
    assert render(load_pattern(path), 4)[:] == [Color(10, 20, 30)] * 4


def test_image_alpha_composited_on_black(tmp_path):
    Image.new("RGBA", (1, 1), (255, 0, 0, 0)).save(tmp_path / "clear.png")
    p = decode_pattern({"_type": "Image", "path": str(tmp_path / "clear.png")})
    assert render(p, 2)[:] == [BLACK, BLACK]


def test_image_grayscale_converted(tmp_path):
    Image.new("L", (1, 1), 77).save(tmp_path / "gray.png")
    p = decode_pattern({"_type": "Image", "path": str(tmp_path / "gray.png")})
    assert render(p, 1)[0] == Color(77, 77, 77)


def test_image_missing_file(tmp_path):
    with pytest.raises(PatternError) as ei:
        decode_pattern({"_type": "Image", "path": str(tmp_path / "missing.png")})
    assert "can't load image" in str(ei.value)


def test_load_pattern_not_utf8(tmp_path):
    path = tmp_path / "anim.json"
    path.write_bytes(b'"\xff\xfe"')
    with pytest.raises(PatternError) as ei:
        load_pattern(path)
    assert "can't read pattern file" in str(ei.value)
    assert "not UTF-8" in str(ei.value)
