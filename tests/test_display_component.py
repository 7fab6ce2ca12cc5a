import pytest

from mediadeck.display import Display, DisplayManager, VideoMode
from mediadeck.display_component import DisplayComponent, Rect, mode_distance
from mediadeck.dummy import DummyDisplayManager


class FakeManager(DisplayManager):
    def __init__(self, modes, current=0):
        super().__init__()
        display = Display(id=0, name="Fake")
        for mode in modes:
            display.video_modes[mode.id] = mode
        self.displays[0] = display
        self.current = current
        self.switches = []

    def initialize(self):
        return super().initialize()

    def set_display_mode(self, display, mode):
        if not self.is_valid_display_mode(display, mode):
            return False
        self.switches.append(mode)
        self.current = mode
        return True

    def get_current_display_mode(self, display):
        return self.current if self.is_valid_display(display) else -1

    def get_main_display(self):
        return 0

    def get_display_from_point(self, x, y):
        return 0 if 0 <= x < 1920 and 0 <= y < 1080 else -1


def _modes():
    return [
        VideoMode(id=0, width=1920, height=1080, bits_per_pixel=32, refresh_rate=60.0),
        VideoMode(id=1, width=1920, height=1080, bits_per_pixel=32, refresh_rate=24.0),
        VideoMode(id=2, width=1920, height=1080, bits_per_pixel=32, refresh_rate=50.0),
        VideoMode(id=3, width=1280, height=720, bits_per_pixel=32, refresh_rate=60.0),
    ]


@pytest.fixture
def component():
    comp = DisplayComponent(FakeManager(_modes()), hdmi_poweron=True)
    comp.set_application_window(Rect(0, 0, 1920, 1080))
    return comp


def test_rect_center_is_inside():
    rect = Rect(10, 20, 300, 200)
    cx, cy = rect.center()
    assert rect.x <= cx < rect.x + rect.width
    assert rect.y <= cy < rect.y + rect.height


def test_mode_distance():
    a = VideoMode(width=1920, height=1080, refresh_rate=60.0)
    b = VideoMode(width=1920, height=1080, refresh_rate=50.0)
    c = VideoMode(width=1280, height=720, refresh_rate=60.0)
    assert mode_distance(a, b) == pytest.approx(10.0)
    assert mode_distance(a, c) == -1


def test_name_and_export():
    comp = DisplayComponent()
    assert comp.component_name() == "display"
    assert comp.component_export() is True


def test_initialize_without_manager_fails():
    assert DisplayComponent().component_initialize() is False


def test_initialize_with_dummy_notifies():
    calls = []
    comp = DisplayComponent(DummyDisplayManager())
    comp.refresh_rate_listeners.append(lambda: calls.append(1))
    assert comp.component_initialize() is True
    assert calls == [1]


def test_application_display():
    comp = DisplayComponent(DummyDisplayManager())
    comp.component_initialize()
    assert comp.get_application_display() == -1
    comp.set_application_window(Rect(0, 0, 1280, 720))
    assert comp.get_application_display() == 0
    comp.set_application_window(Rect(5000, 5000, 100, 100))
    assert comp.get_application_display(silent=True) == -1


def test_switch_to_best_video_mode_and_restore(component):
    manager = component.display_manager
    assert component.switch_to_best_video_mode(24.0) is True
    assert manager.current == 1
    assert component.restore_previous_video_mode() is True
    assert manager.current == 0
    assert component.restore_previous_video_mode() is False


def test_switch_to_best_video_mode_already_best(component):
    assert component.switch_to_best_video_mode(60.0) is False
    assert component.display_manager.switches == []


def test_switch_without_window():
    comp = DisplayComponent(FakeManager(_modes()))
    assert comp.switch_to_best_video_mode(24.0) is False


def test_best_overall_respects_setting():
    comp = DisplayComponent(FakeManager(_modes(), current=1), hdmi_poweron=False)
    assert comp.switch_to_best_overall_video_mode(0) is False
    comp.hdmi_poweron = True
    assert comp.switch_to_best_overall_video_mode(0) is True
    manager = comp.display_manager
    assert manager.current == manager.find_best_mode(0)
    assert comp.switch_to_best_overall_video_mode(0) is False
    assert comp.switch_to_best_overall_video_mode(7) is False


def test_current_refresh_rate(component):
    assert component.current_refresh_rate() == 60.0
    component.display_manager.current = 2
    assert component.current_refresh_rate() == 50.0
    assert DisplayComponent().current_refresh_rate() == 0


def test_switch_command_rate(component):
    assert component.switch_command("24hz") is True
    assert component.display_manager.current == 1


def test_switch_command_resolution(component):
    assert component.switch_command("1280x720 p") is True
    assert component.display_manager.current == 3


def test_switch_command_explicit_mode(component):
    assert component.switch_command("mode=2") is True
    assert component.display_manager.current == 2


def test_switch_command_not_found(component):
    assert component.switch_command("640x480") is False
    assert component.switch_command("i") is False
    assert component.display_manager.switches == []


def test_switch_command_without_manager():
    assert DisplayComponent().switch_command("24hz") is False


def test_display_name_and_mode_pretty(component):
    assert component.display_name(-1) == "(not found)"
    assert component.display_name(0) == "#0 Fake"
    assert component.display_name(5) == "#5 (not valid)"
    assert component.mode_pretty(0, -1) == "(not found)"
    assert component.mode_pretty(0, 9) == "#9 (not valid)"
    expected = "#1 " + component.display_manager.displays[0].video_modes[1].pretty_name()
    assert component.mode_pretty(0, 1) == expected


def test_debug_information_without_manager():
    info = DisplayComponent().debug_information()
    assert info == "Display\n  (no DisplayManager initialized)\n\n"


def test_debug_information_with_manager(component):
    component.switch_to_best_video_mode(24.0)
    info = component.debug_information()
    assert info.startswith("Display\n")
    assert "  Current screen: #0 Fake\n" in info
    assert "Switch back to mode: " + component.mode_pretty(0, 0) in info


def test_monitor_change_debounces():
    scheduled = []
    comp = DisplayComponent(
        FakeManager(_modes()), scheduler=lambda delay, cb: scheduled.append(cb)
    )
    comp.monitor_change()
    comp.monitor_change()
    assert len(scheduled) == 1
    assert scheduled[0]() is True
    comp.monitor_change()
    assert len(scheduled) == 2


def test_post_initialize_registers_commands(component):
    registered = {}

    class Registry:
        def register_host_command(self, command, function):
            registered[command] = function

    component.component_post_initialize(Registry())
    assert set(registered) == {"switch", "recreateRpiUI"}
    assert registered["switch"]("mode=2") is True
    assert component.display_manager.current == 2