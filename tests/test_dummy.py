import pytest

from mediadeck.display import MatchMediaInfo
from mediadeck.dummy import DummyDisplayManager


@pytest.fixture
def manager():
    m = DummyDisplayManager()
    assert m.initialize() is True
    return m


def test_initialize_creates_single_display(manager):
    assert list(manager.displays) == [0]
    display = manager.displays[0]
    assert display.name == "Dummy display"
    assert len(display.video_modes) == 1
    mode = display.video_modes[0]
    assert (mode.width, mode.height, mode.refresh_rate) == (1280, 720, 60)
    assert mode.interlaced is False


def test_add_mode_assigns_sequential_ids(manager):
    manager.add_mode(24)
    manager.add_mode(50)
    modes = manager.displays[0].video_modes
    assert sorted(modes) == [0, 1, 2]
    assert all(mode_id == mode.id for mode_id, mode in modes.items())
    assert modes[2].refresh_rate == 50


def test_add_mode_without_display_does_nothing():
    m = DummyDisplayManager()
    m.add_mode(24)
    assert m.displays == {}


def test_reinitialize_resets_modes(manager):
    manager.add_mode(24)
    manager.initialize()
    assert len(manager.displays[0].video_modes) == 1


def test_set_display_mode(manager):
    manager.add_mode(24)
    assert manager.set_display_mode(0, 1) is True
    assert manager.get_current_display_mode(0) == 1
    assert manager.set_display_mode(0, 7) is False
    assert manager.set_display_mode(1, 0) is False
    assert manager.get_current_display_mode(0) == 1


def test_current_mode_invalid_display(manager):
    assert manager.get_current_display_mode(0) == 0
    assert manager.get_current_display_mode(2) == -1


def test_main_display(manager):
    assert manager.get_main_display() == 0


@pytest.mark.parametrize(
    "x, y, expected",
    [(0, 0, 0), (1279, 719, 0), (1280, 0, -1), (0, 720, -1), (-1, 5, -1)],
)
def test_display_from_point(manager, x, y, expected):
    assert manager.get_display_from_point(x, y) == expected


def test_display_from_point_without_displays():
    assert DummyDisplayManager().get_display_from_point(10, 10) == -1


def test_best_match_on_dummy(manager):
    manager.add_mode(24)
    assert manager.find_best_match(0, MatchMediaInfo(24, False)) == 1
    assert manager.find_best_mode(0) == 0