"""The display component: picks and switches video modes to suit the media being played."""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from typing import Callable, Protocol

from .components import Component
from .display import DisplayManager, MatchMediaInfo, VideoMode

log = logging.getLogger(__name__)

_REINIT_DELAY = 1.0
_INT_RE = re.compile(r"[+-]?\d+")

Scheduler = Callable[[float, Callable[[], object]], None]


class HostCommandRegistry(Protocol):
    def register_host_command(self, command: str, function: Callable[..., object]) -> None: ...


@dataclass(frozen=True)
class Rect:
    """An integer rectangle, as a window's geometry on the virtual desktop."""

    x: int
    y: int
    width: int
    height: int

    def center(self) -> tuple[int, int]:
        """Centre point, rounding towards the top left like the windowing toolkit does."""
        right = self.x + self.width - 1
        bottom = self.y + self.height - 1
        return int((self.x + right) / 2), int((self.y + bottom) / 2)


def mode_distance(first: VideoMode, second: VideoMode) -> float:
    """Refresh-rate distance between two modes of the same geometry, or -1 if they differ."""
    if (
        first.height == second.height
        and first.width == second.width
        and first.bits_per_pixel == second.bits_per_pixel
        and first.interlaced == second.interlaced
    ):
        return abs(first.refresh_rate - second.refresh_rate)
    return -1


def _default_scheduler(delay: float, callback: Callable[[], object]) -> None:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()


def _parse_int(text: str) -> int | None:
    text = text.strip()
    return int(text) if _INT_RE.fullmatch(text) else None


def _parse_float(text: str) -> float | None:
    try:
        return float(text.strip())
    except ValueError:
        return None


class DisplayComponent(Component):
    """Keeps track of the application's display and switches its video modes."""

    def __init__(
        self,
        display_manager: DisplayManager | None = None,
        *,
        hdmi_poweron: bool = False,
        avoid_25_30: bool = False,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.display_manager = display_manager
        self.hdmi_poweron = hdmi_poweron
        self.avoid_25_30 = avoid_25_30
        self.refresh_rate_listeners: list[Callable[[], object]] = []
        self._scheduler = scheduler or _default_scheduler
        self._reinit_pending = False
        self._last_video_mode = -1
        self._last_display = -1
        self._window: Rect | None = None

    def component_name(self) -> str:
        return "display"

    def component_export(self) -> bool:
        return True

    def component_initialize(self) -> bool:
        return self.initialize_display_manager()

    def component_post_initialize(self, input_component: HostCommandRegistry) -> None:
        """Register the host commands this component answers to."""
        input_component.register_host_command("switch", self.switch_command)
        if self.display_manager is not None:
            input_component.register_host_command(
                "recreateRpiUI", self.display_manager.reset_rendering
            )

    def initialize_display_manager(self) -> bool:
        """(Re)read the displays and notify refresh-rate listeners."""
        self._reinit_pending = False
        result = False
        if self.display_manager is not None:
            result = self.display_manager.initialize()
        for listener in list(self.refresh_rate_listeners):
            listener()
        return result

    def monitor_change(self) -> None:
        """Schedule one re-initialization shortly after monitors change."""
        log.info("Monitor change detected.")
        if not self._reinit_pending:
            self._reinit_pending = True
            self._scheduler(_REINIT_DELAY, self.initialize_display_manager)

    def set_application_window(self, geometry: Rect | None) -> None:
        """Record where the application window is, or None if there is none."""
        self._window = geometry

    def get_application_display(self, silent: bool = False) -> int:
        """Return the id of the display holding the window centre, or -1."""
        display = -1
        if self._window is not None and self.display_manager is not None:
            center = self._window.center()
            if not silent:
                log.info("Looking for a display at: %s (center: %s)", self._window, center)
            display = self.display_manager.get_display_from_point(*center)
        if not silent:
            log.info("Display index: %d", display)
        return display

    def switch_to_best_video_mode(self, frame_rate: float) -> bool:
        """Switch to the best mode for ``frame_rate``; True only if the mode changed."""
        self.initialize_display_manager()
        manager = self.display_manager
        if manager is None:
            return False

        current_display = self.get_application_display()
        if current_display < 0:
            log.info("Not switching rate - current display not found.")
            return False

        current_mode = manager.get_current_display_mode(current_display)
        if self._last_video_mode < 0:
            self._last_video_mode = current_mode
            self._last_display = current_display

        log.debug("Current display: %d mode: %d", current_display, current_mode)

        best = manager.find_best_match(
            current_display, MatchMediaInfo(frame_rate, False), self.avoid_25_30
        )
        if best < 0:
            log.debug("No video mode found as better match.")
            return False
        if best == current_mode:
            log.info("No better video mode than the currently active one found.")
            return False

        log.debug(
            "Best video matching mode is %s on display %d",
            manager.displays[current_display].video_modes[best].pretty_name(),
            current_display,
        )
        if not manager.set_display_mode(current_display, best):
            log.info("Mode switching failed.")
            return False
        return True

    def switch_to_best_overall_video_mode(self, display: int) -> bool:
        """Switch ``display`` to its best mode overall; True if the mode changed."""
        self.initialize_display_manager()
        manager = self.display_manager
        if manager is None or not manager.is_valid_display(display):
            return False

        if not self.hdmi_poweron:
            log.info("Switching to best mode disabled.")
            return False

        best = manager.find_best_mode(display)
        if best < 0:
            return False

        log.info("We think mode %d is the best mode.", best)
        if best == manager.get_current_display_mode(display):
            log.info("This mode is the currently active one. Not switching.")
            return False

        if not manager.set_display_mode(display, best):
            log.info("Switching mode failed.")
            return False

        log.info("Switching mode successful.")
        return True

    def current_refresh_rate(self) -> float:
        """Refresh rate of the application's display, or 0 if unknown."""
        manager = self.display_manager
        if manager is None:
            return 0
        display = self.get_application_display()
        if display < 0:
            return 0
        mode = manager.get_current_display_mode(display)
        if mode < 0:
            return 0
        return manager.displays[display].video_modes[mode].refresh_rate

    def restore_previous_video_mode(self) -> bool:
        """Switch back to the mode active before the last rate switch."""
        self.initialize_display_manager()
        manager = self.display_manager
        if manager is None:
            return False
        if not manager.is_valid_display_mode(self._last_display, self._last_video_mode):
            return False

        result = True
        if manager.get_current_display_mode(self._last_display) != self._last_video_mode:
            log.debug(
                "Restoring VideoMode to %s on display %d",
                manager.displays[self._last_display]
                .video_modes[self._last_video_mode]
                .pretty_name(),
                self._last_display,
            )
            result = manager.set_display_mode(self._last_display, self._last_video_mode)

        self._last_video_mode = -1
        self._last_display = -1
        return result

    def display_name(self, display: int) -> str:
        if display < 0:
            return "(not found)"
        prefix = f"#{display} "
        manager = self.display_manager
        if manager is not None and manager.is_valid_display(display):
            return prefix + manager.displays[display].name
        return prefix + "(not valid)"

    def mode_pretty(self, display: int, mode: int) -> str:
        if mode < 0:
            return "(not found)"
        prefix = f"#{mode} "
        manager = self.display_manager
        if manager is not None and manager.is_valid_display_mode(display, mode):
            return prefix + manager.displays[display].video_modes[mode].pretty_name()
        return prefix + "(not valid)"

    def debug_information(self) -> str:
        """A short report on the current display and mode."""
        lines = ["Display"]
        manager = self.display_manager
        if manager is None:
            lines.append("  (no DisplayManager initialized)")
        else:
            display = self.get_application_display(True)
            mode = -1 if display < 0 else manager.get_current_display_mode(display)
            lines.append(f"  Current screen: {self.display_name(display)}")
            if display >= 0:
                lines.append(f"  Current mode: {self.mode_pretty(display, mode)}")
            if manager.is_valid_display_mode(self._last_display, self._last_video_mode):
                lines.append(f"  Switch back on screen: {self.display_name(self._last_display)}")
                lines.append(
                    "  Switch back to mode: "
                    f"{self.mode_pretty(self._last_display, self._last_video_mode)}"
                )
        return "\n".join(lines) + "\n\n"

    def switch_command(self, command: str) -> bool:
        """Switch modes as described by ``command``, e.g. "1280x720 p 50hz" or "mode=3".

        Returns whether a mode switch was made.
        """
        manager = self.display_manager
        if manager is None:
            log.error("Display manager not set")
            return False
        if not self.initialize_display_manager():
            log.error("Could not reinitialize display manager")
            return False

        display = self.get_application_display()
        if display < 0:
            log.error("Current display not found")
            return False
        current_id = manager.get_current_display_mode(display)
        if current_id < 0:
            log.error("Current mode not found")
            return False

        modes = manager.displays[display].video_modes
        current = modes[current_id]
        wanted = VideoMode(**vars(current))
        best_mode = -1

        for arg in (part.strip() for part in command.split(" ")):
            if arg == "p":
                wanted.interlaced = False
            elif arg == "i":
                wanted.interlaced = True
            elif arg.endswith("hz"):
                rate = _parse_float(arg[:-2])
                if rate is not None:
                    wanted.refresh_rate = rate
            elif arg.startswith("mode="):
                new_id = _parse_int(arg[5:])
                if new_id is not None and manager.is_valid_display_mode(display, new_id):
                    best_mode = new_id
            elif "x" in arg:
                parts = arg.split("x")
                if len(parts) != 2:
                    continue
                width = _parse_int(parts[0])
                height = _parse_int(parts[1])
                if width is None or height is None:
                    continue
                wanted.width = width
                wanted.height = height

        log.info("Current mode: %s", current.pretty_name())

        if best_mode < 0:
            log.info("Mode requested by command: %s", wanted.pretty_name())
            for _, candidate in sorted(modes.items()):
                distance = mode_distance(candidate, wanted)
                if distance < 0:
                    continue
                if best_mode < 0 or distance < mode_distance(modes[best_mode], wanted):
                    best_mode = candidate.id

        if best_mode < 0:
            log.info("Requested mode not found.")
            return False

        log.info("Found mode to switch to: %s", modes[best_mode].pretty_name())
        if manager.set_display_mode(display, best_mode):
            self._last_display = self._last_video_mode = -1
            return True
        log.info("Switching failed.")
        return False