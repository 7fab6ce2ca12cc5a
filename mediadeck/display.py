"""Display and video-mode model, plus the mode-matching logic shared by all display managers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

MATCH_WEIGHT_RES = 1000
MATCH_WEIGHT_REFRESH_RATE_EXACT = 200
MATCH_WEIGHT_REFRESH_RATE_MULTIPLE = 75
MATCH_WEIGHT_REFRESH_RATE_CLOSE = 50
MATCH_WEIGHT_REFRESH_RATE_MULTIPLE_CLOSE = 25
MATCH_WEIGHT_INTERLACE = 10
MATCH_WEIGHT_CURRENT = 5


@dataclass
class VideoMode:
    """One video mode a display supports."""

    id: int = 0
    width: int = 0
    height: int = 0
    bits_per_pixel: int = 0
    refresh_rate: float = 0.0
    interlaced: bool = False
    priv_id: int = 0

    def pretty_name(self) -> str:
        """Human readable description, e.g. ' 1920 x 1080 x 32bpp @60Hz'."""
        scan = "i" if self.interlaced else " "
        return (
            f"{self.width:>5} x{self.height:>5}{scan}"
            f"x {self.bits_per_pixel:>2}bpp @{self.refresh_rate:g}Hz"
        )


@dataclass
class Display:
    """A physical display and the video modes it offers, keyed by mode id."""

    id: int = 0
    name: str = ""
    priv_id: int = 0
    video_modes: dict[int, VideoMode] = field(default_factory=dict)


@dataclass
class MatchMediaInfo:
    """What the media being played wants from the display."""

    refresh_rate: float = 0.0
    interlaced: bool = False


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


def is_rate_multiple_of(refresh: float, multiple: float, exact: bool = True) -> bool:
    """Tell whether the display rate ``multiple`` is a whole multiple of the video rate ``refresh``."""
    rounded_refresh = round(refresh)
    rounded_multiple = round(multiple)
    if rounded_refresh == 0:
        return False

    factor = _trunc_div(rounded_multiple, rounded_refresh)
    new_rate = factor * refresh
    if new_rate < 1:
        return False

    tolerance = 0.01 * factor if exact else 1
    return abs(new_rate - multiple) < tolerance


class DisplayManager(ABC):
    """Base for platform display managers; holds displays keyed by display id."""

    def __init__(self) -> None:
        self.displays: dict[int, Display] = {}

    def initialize(self) -> bool:
        """Log the known displays and modes; subclasses fill ``displays`` first."""
        log.info("DisplayManager found %d Display(s).", len(self.displays))
        for display_id, display in sorted(self.displays.items()):
            log.info("Available modes for Display #%d (%s)", display_id, display.name)
            for mode_id, mode in sorted(display.video_modes.items()):
                log.info("Mode %2d: %s", mode_id, mode.pretty_name())

        main_display = self.get_main_display()
        if main_display >= 0:
            current = self.get_current_display_mode(main_display)
            if current >= 0 and self.is_valid_display_mode(main_display, current):
                log.info(
                    "DisplayManager : Current Display Mode on Display #%d is %s",
                    main_display,
                    self.displays[main_display].video_modes[current].pretty_name(),
                )
            else:
                log.error("DisplayManager : unable to retrieve current video mode")
        else:
            log.error("DisplayManager : unable to retrieve main display")
        return True

    @abstractmethod
    def set_display_mode(self, display: int, mode: int) -> bool:
        """Switch ``display`` to ``mode``; return whether it worked."""

    @abstractmethod
    def get_current_display_mode(self, display: int) -> int:
        """Return the id of the active mode on ``display``, or -1."""

    @abstractmethod
    def get_main_display(self) -> int:
        """Return the id of the main display, or -1."""

    @abstractmethod
    def get_display_from_point(self, x: int, y: int) -> int:
        """Return the id of the display containing the point, or -1."""

    def reset_rendering(self) -> None:
        """Recreate rendering state after a mode change; nothing by default."""

    def is_valid_display(self, display: int) -> bool:
        return display in self.displays

    def is_valid_display_mode(self, display: int, mode: int) -> bool:
        return self.is_valid_display(display) and 0 <= mode < len(
            self.displays[display].video_modes
        )

    def get_current_video_mode(self, display: int) -> VideoMode | None:
        """Return the active VideoMode of ``display``, or None."""
        current = self.get_current_display_mode(display)
        if current < 0 or display not in self.displays:
            return None
        return self.displays[display].video_modes.get(current)

    def find_best_match(
        self, display: int, match_info: MatchMediaInfo, avoid_25_30: bool = False
    ) -> int:
        """Return the id of the mode that best fits ``match_info``, or -1."""
        current = self.get_current_video_mode(display)
        if current is None:
            return -1

        weights: dict[int, tuple[float, VideoMode]] = {}
        for _, candidate in sorted(self.displays[display].video_modes.items()):
            rate = candidate.refresh_rate
            if abs(rate - 30.0) < 0.5 or abs(rate - 25.0) < 0.5:
                if avoid_25_30:
                    log.info(
                        "DisplayManager RefreshMatch : skipping rate %s as requested", rate
                    )
                    continue

            weight = 0
            if (
                candidate.width == current.width
                and candidate.height == current.height
                and candidate.bits_per_pixel == current.bits_per_pixel
            ):
                weight += MATCH_WEIGHT_RES
            if abs(rate - match_info.refresh_rate) <= 0.01:
                weight += MATCH_WEIGHT_REFRESH_RATE_EXACT
            if is_rate_multiple_of(match_info.refresh_rate, rate, True):
                weight += MATCH_WEIGHT_REFRESH_RATE_MULTIPLE
            if abs(rate - match_info.refresh_rate) <= 0.5:
                weight += MATCH_WEIGHT_REFRESH_RATE_CLOSE
            if is_rate_multiple_of(match_info.refresh_rate, rate, False):
                weight += MATCH_WEIGHT_REFRESH_RATE_MULTIPLE_CLOSE
            if candidate.interlaced == match_info.interlaced:
                weight += MATCH_WEIGHT_INTERLACE
            if candidate.id == current.id:
                weight += MATCH_WEIGHT_CURRENT

            weights[candidate.id] = (weight, candidate)

        chosen: tuple[float, VideoMode] | None = None
        max_weight: float = 0
        for _, (weight, mode) in sorted(weights.items()):
            log.debug("Mode %d (%s) has weight %s", mode.id, mode.pretty_name(), weight)
            if weight > max_weight:
                chosen = (weight, mode)
                max_weight = weight

        if chosen is not None and chosen[0] > MATCH_WEIGHT_RES:
            log.info(
                "DisplayManager RefreshMatch : found a suitable mode : %s",
                chosen[1].pretty_name(),
            )
            return chosen[1].id

        log.info("DisplayManager RefreshMatch : found no suitable videomode")
        return -1

    def find_best_mode(self, display: int) -> int:
        """Return the id of the overall best mode of ``display``, or -1."""
        if display not in self.displays:
            return -1
        modes = self.displays[display].video_modes
        best_mode = -1
        for _, candidate in sorted(modes.items()):
            if best_mode < 0:
                best_mode = candidate.id
                continue
            best = modes[best_mode]
            if not best.interlaced and candidate.interlaced:
                continue
            if best.bits_per_pixel > candidate.bits_per_pixel:
                continue
            if best.width > candidate.width:
                continue
            if best.height > candidate.height:
                continue
            if best.refresh_rate > candidate.refresh_rate:
                continue
            best_mode = candidate.id
        return best_mode