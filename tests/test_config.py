import pytest

from lightloop.config import RunConfig
from lightloop.errors import PatternError, StartupError
from lightloop.patterns import SolidColor


def valid(**kw):
    kw.setdefault("pattern_raw", '"#ff0000"')
    return RunConfig(**kw)


def test_defaults_are_valid():
    cfg = valid()
    cfg.validate()
    assert (cfg.fps, cfg.num_pixels, cfg.intensity, cfg.temperature) == (30, 44, 127, 5000)


@pytest.mark.parametrize("kw, message", [
    ({"intensity": 0}, "intensity must be between 1 and 255"),
    ({"intensity": 256}, "intensity must be between 1 and 255"),
    ({"temperature": -1}, "temperature must be between 0 and 65535"),
    ({"temperature": 65536}, "temperature must be between 0 and 65535"),
    ({"num_pixels": 0}, "number of pixels must be between 1 and 10000"),
    ({"num_pixels": 10001}, "number of pixels must be between 1 and 10000"),
    ({"fps": 0}, "fps must be between 1 and 200"),
    ({"fps": 201}, "fps must be between 1 and 200"),
    ({"hz": -1}, "bus speed"),
    ({"driver": "dotstar"}, "driver must be one of"),
])
def test_out_of_range(kw, message):
    with pytest.raises(StartupError) as ei:
        valid(**kw).validate()
    assert str(ei.value) == message or message in str(ei.value)


@pytest.mark.parametrize("kw", [
    {"fps": 1}, {"fps": 200}, {"num_pixels": 1}, {"num_pixels": 10000},
    {"intensity": 1}, {"intensity": 255}, {"temperature": 0}, {"temperature": 65535},
])
def test_bounds_inclusive(kw):
    valid(**kw).validate()


def test_both_pattern_sources():
    with pytest.raises(StartupError) as ei:
        RunConfig(pattern_file="a.json", pattern_raw='"#ff0000"').validate()
    assert "both -f and -r" in str(ei.value)


def test_no_pattern_source():
    with pytest.raises(StartupError) as ei:
        RunConfig().validate()
    assert "use one of -f or -r" in str(ei.value)


def test_load_inline_pattern():
    assert isinstance(valid().load_pattern(), SolidColor)


def test_load_pattern_file(tmp_path):
    path = tmp_path / "p.json"
    path.write_text('"Rainbow"')
    assert RunConfig(pattern_file=str(path)).load_pattern() is not None


def test_bad_pattern_is_startup_error():
    with pytest.raises(StartupError):
        RunConfig(pattern_raw="{").load_pattern()
    with pytest.raises(PatternError):
        RunConfig(pattern_raw="{").load_pattern()
