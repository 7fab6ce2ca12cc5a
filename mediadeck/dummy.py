"""A display manager with one fixed display, for systems without mode switching."""

from __future__ import annotations

import logging

from .display import Display, DisplayManager, VideoMode

log = logging.getLogger(__name__)

_WIDTH = 1280
_HEIGHT = 720


class DummyDisplayManager(DisplayManager):
    """One 1280x720 display whose modes can be switched freely."""

    def __init__(self) -> None:
        super().__init__()
        self.current_mode = 0

    def add_mode(self, rate: float) -> None:
        """Add a 1280x720 progressive mode with the given refresh rate to display 0."""
        if not self.displays:
            return
        display = self.displays[0]
        mode = VideoMode(
            id=len(display.video_modes),
            width=_WIDTH,
            height=_HEIGHT,
            bits_per_pixel=0,
            refresh_rate=rate,
            interlaced=False,
        )
        display.video_modes[mode.id] = mode

    def initialize(self) -> bool:
        self.displays.clear()
        display = Display(id=len(self.displays), name="Dummy display")
        self.displays[display.id] = display
        self.add_mode(60)
        return super().initialize()

    def set_display_mode(self, display: int, mode: int) -> bool:
        if not self.is_valid_display_mode(display, mode):
            return False
        video_mode = self.displays[display].video_modes[mode]
        log.info(
            "Switching to %d x %d @ %s",
            video_mode.width,
            video_mode.height,
            video_mode.refresh_rate,
        )
        self.current_mode = video_mode.id
        return True

    def get_current_display_mode(self, display: int) -> int:
        if not self.is_valid_display(display):
            return -1
        return self.current_mode

    def get_main_display(self) -> int:
        return 0

    def get_display_from_point(self, x: int, y: int) -> int:
        if self.displays and 0 <= x < _WIDTH and 0 <= y < _HEIGHT:
            return 0
        return -1