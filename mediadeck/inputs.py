"""Input sources: the key-state model, the keyboard source and the socket source."""

from __future__ import annotations

import datetime
import enum
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, Protocol

log = logging.getLogger(__name__)

KEY_LEFT = "KEY_LEFT"
KEY_RIGHT = "KEY_RIGHT"
KEY_UP = "KEY_UP"
KEY_DOWN = "KEY_DOWN"
KEY_SELECT = "KEY_SELECT"
KEY_MENU = "KEY_MENU"
KEY_PLAY = "KEY_PLAY"
KEY_PAUSE = "KEY_PAUSE"
KEY_PLAY_PAUSE = "KEY_PLAY_PAUSE"
KEY_STOP = "KEY_STOP"
KEY_BACK = "KEY_BACK"
KEY_SEEKFWD = "KEY_SEEKFWD"
KEY_SEEKBCK = "KEY_SEEKBCK"
KEY_SUBTITLES = "KEY_SUBTITLES"
KEY_INFO = "KEY_INFO"
KEY_NEXT = "KEY_NEXT"
KEY_PREV = "KEY_PREV"
KEY_RED = "KEY_RED"
KEY_GREEN = "KEY_GREEN"
KEY_BLUE = "KEY_BLUE"
KEY_YELLOW = "KEY_YELLOW"
KEY_HOME = "KEY_HOME"
KEY_0 = "KEY_NUMERIC_0"
KEY_1 = "KEY_NUMERIC_1"
KEY_2 = "KEY_NUMERIC_2"
KEY_3 = "KEY_NUMERIC_3"
KEY_4 = "KEY_NUMERIC_4"
KEY_5 = "KEY_NUMERIC_5"
KEY_6 = "KEY_NUMERIC_6"
KEY_7 = "KEY_NUMERIC_7"
KEY_8 = "KEY_NUMERIC_8"
KEY_9 = "KEY_NUMERIC_9"
KEY_GUIDE = "KEY_GUIDE"

KEY_LEFT_LONG = "KEY_LEFT_LONG"
KEY_RIGHT_LONG = "KEY_RIGHT_LONG"
KEY_UP_LONG = "KEY_UP_LONG"
KEY_DOWN_LONG = "KEY_DOWN_LONG"
KEY_SELECT_LONG = "KEY_SELECT_LONG"
KEY_MENU_LONG = "KEY_MENU_LONG"
KEY_PLAY_LONG = "KEY_PLAY_LONG"


class KeyState(enum.Enum):
    """What happened to a key."""

    KEY_DOWN = 0
    KEY_UP = 1
    KEY_PRESSED = 2


InputListener = Callable[[str, str, KeyState], object]


class InputBase(ABC):
    """A source of key input; listeners get (source, keycode, state) for each key."""

    def __init__(self) -> None:
        self._listeners: list[InputListener] = []

    @abstractmethod
    def init_input(self) -> bool:
        """Start the source; return whether it is usable."""

    @abstractmethod
    def input_name(self) -> str:
        """Name of this input source."""

    def connect(self, callback: InputListener) -> InputListener:
        """Call ``callback`` for every key this source reports."""
        self._listeners.append(callback)
        return callback

    def emit(self, source: str, keycode: str, state: KeyState) -> None:
        """Report a key to all listeners."""
        for listener in list(self._listeners):
            listener(source, keycode, state)


class InputKeyboard(InputBase):
    """Key events coming from the application window's keyboard."""

    def init_input(self) -> bool:
        return True

    def input_name(self) -> str:
        return "Keyboard"

    def key_press(self, keys: str, state: KeyState) -> None:
        self.emit("Keyboard", keys, state)


class MessageServer(Protocol):
    def listen(self) -> bool: ...

    def send_message(self, message: Any, client: Any) -> None: ...


class InputSocket(InputBase):
    """Key presses sent as JSON messages by local clients."""

    def __init__(
        self,
        server: MessageServer,
        *,
        version: str = "1.12.0",
        build_date: str | None = None,
    ) -> None:
        super().__init__()
        self.server = server
        self.version = version
        self.build_date = build_date or datetime.date.today().isoformat()

    def init_input(self) -> bool:
        return self.server.listen()

    def input_name(self) -> str:
        return "socket"

    def client_connected(self, client: Any) -> None:
        """Greet a new client with the application version."""
        welcome = {"version": self.version, "builddate": self.build_date}
        self.server.send_message(welcome, client)

    def message_received(self, message: Any) -> None:
        """Turn a client message with client, source and keycode into a key press."""
        if not isinstance(message, Mapping) or not all(
            key in message for key in ("client", "source", "keycode")
        ):
            log.warning("Got packet from client but it was missing the important fields")
            return

        source = str(message["source"])
        keycode = str(message["keycode"])
        log.debug("Input from client: %s - %s %s", message["client"], source, keycode)
        self.emit(source, keycode, KeyState.KEY_PRESSED)