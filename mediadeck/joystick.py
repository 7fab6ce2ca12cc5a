"""Joystick and game-pad input: turns button, hat and axis events into key events."""

from __future__ import annotations

import enum
import logging
import threading
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Callable, Protocol, Union

from .inputs import InputBase, KeyState

log = logging.getLogger(__name__)

JOYSTICK_INPUT_NAME = "SDL"
UNKNOWN_JOYSTICK = "unknown joystick"
# Seconds each polling round takes at least.
SDL_POLL_TIME = 0.05
SDL_BUTTON_REPEAT_DELAY = 0.5
SDL_BUTTON_REPEAT_RATE = 0.1

# An axis past half its range counts as pressed; back within this it is released.
_AXIS_PRESS = 32768 // 2
_AXIS_RELEASE = 10000
_JOIN_TIMEOUT = 1.0


class Hat(enum.IntEnum):
    """Hat switch positions."""

    CENTERED = 0x00
    UP = 0x01
    RIGHT = 0x02
    DOWN = 0x04
    LEFT = 0x08


@dataclass(frozen=True)
class ButtonEvent:
    joystick_id: int
    button: int
    pressed: bool


@dataclass(frozen=True)
class HatEvent:
    joystick_id: int
    value: int


@dataclass(frozen=True)
class AxisEvent:
    joystick_id: int
    axis: int
    value: int


@dataclass(frozen=True)
class DeviceEvent:
    """A joystick was plugged in (``added``) or removed."""

    added: bool


@dataclass(frozen=True)
class QuitEvent:
    """The event source is shutting down."""


JoystickEvent = Union[ButtonEvent, HatEvent, AxisEvent, DeviceEvent, QuitEvent]
KeyEvent = tuple[str, str, KeyState]


class JoystickTranslator:
    """Turns raw joystick events into (source, keycode, state) key events."""

    def __init__(self) -> None:
        self.joysticks: dict[int, str] = {}
        self._axis_state: dict[int, bool] = {}
        self._last_hat = ""

    def set_joysticks(self, joysticks: Mapping[int, str]) -> None:
        """Replace the known joysticks, keyed by instance id."""
        self.joysticks = dict(joysticks)
        for joystick_id, name in sorted(self.joysticks.items()):
            log.info("JoyStick #%d is %s", joystick_id, name)
        if self.joysticks:
            self._axis_state.clear()

    def name_for_id(self, joystick_id: int) -> str:
        return self.joysticks.get(joystick_id, UNKNOWN_JOYSTICK)

    def translate(self, event: JoystickEvent) -> list[KeyEvent]:
        """Key events produced by ``event``; device and quit events produce none."""
        if isinstance(event, ButtonEvent):
            state = KeyState.KEY_DOWN if event.pressed else KeyState.KEY_UP
            return [(self.name_for_id(event.joystick_id), f"KEY_BUTTON_{event.button}", state)]
        if isinstance(event, HatEvent):
            return [self._hat(event)]
        if isinstance(event, AxisEvent):
            return self._axis(event)
        if isinstance(event, (DeviceEvent, QuitEvent)):
            return []
        log.warning("Unhandled joystick event: %r", event)
        return []

    def _hat(self, event: HatEvent) -> KeyEvent:
        name = "KEY_HAT_"
        pressed = True
        if event.value == Hat.CENTERED:
            name = self._last_hat or name + "CENTERED"
            pressed = False
        elif event.value in (Hat.UP, Hat.DOWN, Hat.RIGHT, Hat.LEFT):
            name += Hat(event.value).name
        self._last_hat = name
        state = KeyState.KEY_DOWN if pressed else KeyState.KEY_UP
        return self.name_for_id(event.joystick_id), name, state

    def _axis(self, event: AxisEvent) -> list[KeyEvent]:
        axis, value = event.axis, event.value
        log.debug("JoyAxisMotion: %d %d", axis, value)
        source = self.name_for_id(event.joystick_id)

        def key(up: bool) -> str:
            return f"KEY_AXIS_{axis}_{'UP' if up else 'DOWN'}"

        if abs(value) > _AXIS_PRESS:
            up = value < 0
            if axis not in self._axis_state:
                self._axis_state[axis] = up
                return [(source, key(up), KeyState.KEY_DOWN)]
            if self._axis_state[axis] != up:
                previous = self._axis_state.pop(axis)
                return [(source, key(previous), KeyState.KEY_UP)]
        elif abs(value) < _AXIS_RELEASE and axis in self._axis_state:
            previous = self._axis_state.pop(axis)
            return [(source, key(previous), KeyState.KEY_UP)]
        return []


class JoystickBackend(Protocol):
    def init(self) -> bool: ...

    def joysticks(self) -> Mapping[int, str]: ...

    def poll(self) -> Iterable[JoystickEvent]: ...

    def quit(self) -> None: ...


class InputJoystick(InputBase):
    """Input source polling a joystick backend on a background thread."""

    def __init__(
        self,
        backend: JoystickBackend,
        *,
        poll_time: float = SDL_POLL_TIME,
        start_thread: bool = True,
        sleep: Callable[[float], object] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.backend = backend
        self.translator = JoystickTranslator()
        self.poll_time = poll_time
        self._start_thread = start_thread
        self._sleep = sleep
        self._clock = clock
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._active = False
        self._thread: threading.Thread | None = None

    def init_input(self) -> bool:
        """(Re)start the backend and, unless disabled, the polling thread."""
        self.close()
        if not self.backend.init():
            log.error("Joystick backend failed to initialize")
            return False
        self._stop = threading.Event()
        with self._lock:
            self._active = True
        self._refresh()
        if self._start_thread:
            self._thread = threading.Thread(
                target=self.run, name="InputJoystick", daemon=True
            )
            self._thread.start()
        return True

    def input_name(self) -> str:
        return JOYSTICK_INPUT_NAME

    def _refresh(self) -> None:
        joysticks = self.backend.joysticks()
        log.info("Found %d joysticks", len(joysticks))
        self.translator.set_joysticks(joysticks)

    def run(self) -> None:
        """Poll and dispatch events until closed or the backend sends a quit event."""
        try:
            while not self._stop.is_set():
                started = self._clock()
                for event in self.backend.poll():
                    if isinstance(event, QuitEvent):
                        return
                    if isinstance(event, DeviceEvent):
                        log.info(
                            "Joystick device was %s.", "added" if event.added else "removed"
                        )
                        self._refresh()
                        continue
                    for source, keycode, state in self.translator.translate(event):
                        self.emit(source, keycode, state)
                elapsed = self._clock() - started
                if elapsed < self.poll_time:
                    self._sleep(self.poll_time - elapsed)
        finally:
            self._shutdown()

    def _shutdown(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
        log.info("Joystick input is closing.")
        self.backend.quit()

    def close(self) -> None:
        """Stop polling and shut the backend down."""
        with self._lock:
            if not self._active:
                return
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(_JOIN_TIMEOUT)
        if thread is None or not thread.is_alive():
            self._shutdown()
            self._thread = None