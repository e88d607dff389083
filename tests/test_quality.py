import pytest

from models import QualitySettings
from quality import SettingsCell, compute_profile


def test_1080p60_profile():
    p = compute_profile(QualitySettings(resolution="1080", fps="60"))

    assert p.height == 1080
    assert p.width == 1920
    assert p.frame_rate == 60
    assert p.pixel_count == 1920 * 1080
    assert (p.bitrate_min, p.bitrate_max, p.bitrate_target) == (500_000, 8_000_000, 600_000)


@pytest.mark.parametrize(
    "resolution, width",
    [("480", 853), ("720", 1280), ("1440", 2560)],
)
def test_width_is_rounded_sixteen_by_nine(resolution, width):
    assert compute_profile(QualitySettings(resolution=resolution, fps="30")).width == width


def test_bitrates_do_not_depend_on_choice():
    low = compute_profile(QualitySettings(resolution="480", fps="15"))
    high = compute_profile(QualitySettings(resolution="1440", fps="60"))

    assert (low.bitrate_min, low.bitrate_max, low.bitrate_target) == (
        high.bitrate_min,
        high.bitrate_max,
        high.bitrate_target,
    )


def test_defaults():
    s = QualitySettings()
    assert (s.resolution, s.fps, s.audio, s.content_hint) == ("1080", "60", True, "motion")


@pytest.mark.parametrize("kw", [{"resolution": "2160"}, {"fps": "120"}, {"content_hint": "text"}])
def test_rejects_unknown_choices(kw):
    with pytest.raises(ValueError):
        QualitySettings(**kw)


def test_cell_last_write_wins():
    cell = SettingsCell()
    assert cell.current() is None
    assert cell.profile() is None
    assert cell.snapshot() == (0, None)

    first = QualitySettings(resolution="720", fps="30")
    second = QualitySettings(resolution="1440", fps="15")
    assert cell.publish(first) == 1
    assert cell.publish(second) == 2

    assert cell.current() is second
    assert cell.snapshot() == (2, second)
    assert cell.profile().height == 1440
