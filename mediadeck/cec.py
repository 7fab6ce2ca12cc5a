"""HDMI-CEC remote input: turns commands from a CEC adapter into key events."""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Protocol, Sequence

from .inputs import (
    KEY_0,
    KEY_1,
    KEY_2,
    KEY_3,
    KEY_4,
    KEY_5,
    KEY_6,
    KEY_7,
    KEY_8,
    KEY_9,
    KEY_BACK,
    KEY_BLUE,
    KEY_DOWN,
    KEY_GREEN,
    KEY_GUIDE,
    KEY_HOME,
    KEY_INFO,
    KEY_LEFT,
    KEY_MENU,
    KEY_NEXT,
    KEY_PAUSE,
    KEY_PLAY,
    KEY_PREV,
    KEY_RED,
    KEY_RIGHT,
    KEY_SEEKBCK,
    KEY_SEEKFWD,
    KEY_SELECT,
    KEY_STOP,
    KEY_SUBTITLES,
    KEY_UP,
    KEY_YELLOW,
    InputBase,
    InputListener,
    KeyState,
)

log = logging.getLogger(__name__)

CEC_INPUT_NAME = "CEC"
# Duration after which a key press counts as long, in seconds.
CEC_LONGPRESS_DURATION = 1.0
ADAPTER_CHECK_INTERVAL = 10.0
MAX_ADAPTERS = 10

DEVICE_TYPE_RECORDING_DEVICE = 1
LOGICAL_ADDRESS_AUDIOSYSTEM = 5
PHYSICAL_ADDRESS_TV = 0x0000


class Opcode(enum.IntEnum):
    """CEC opcodes this input reacts to."""

    STANDBY = 0x36
    PLAY = 0x41
    DECK_CONTROL = 0x42
    USER_CONTROL_PRESSED = 0x44
    USER_CONTROL_RELEASE = 0x45
    GIVE_OSD_NAME = 0x46
    GIVE_PHYSICAL_ADDRESS = 0x83
    VENDOR_REMOTE_BUTTON_DOWN = 0x8A
    VENDOR_REMOTE_BUTTON_UP = 0x8B


class UserControlCode(enum.IntEnum):
    """Remote control button codes."""

    SELECT = 0x00
    UP = 0x01
    DOWN = 0x02
    LEFT = 0x03
    RIGHT = 0x04
    ROOT_MENU = 0x09
    SETUP_MENU = 0x0A
    EXIT = 0x0D
    NUMBER0 = 0x20
    NUMBER1 = 0x21
    NUMBER2 = 0x22
    NUMBER3 = 0x23
    NUMBER4 = 0x24
    NUMBER5 = 0x25
    NUMBER6 = 0x26
    NUMBER7 = 0x27
    NUMBER8 = 0x28
    NUMBER9 = 0x29
    DISPLAY_INFORMATION = 0x35
    PLAY = 0x44
    STOP = 0x45
    PAUSE = 0x46
    REWIND = 0x48
    FAST_FORWARD = 0x49
    FORWARD = 0x4B
    BACKWARD = 0x4C
    SUB_PICTURE = 0x51
    ELECTRONIC_PROGRAM_GUIDE = 0x53
    F1_BLUE = 0x71
    F2_RED = 0x72
    F3_GREEN = 0x73
    F4_YELLOW = 0x74
    AN_RETURN = 0x91


class DeckControlMode(enum.IntEnum):
    SKIP_FORWARD_WIND = 1
    SKIP_REVERSE_REWIND = 2
    STOP = 3
    EJECT = 4


class LogLevel(enum.IntEnum):
    ERROR = 1
    WARNING = 2
    NOTICE = 4
    TRAFFIC = 8
    DEBUG = 16


class Alert(enum.IntEnum):
    SERVICE_DEVICE = 0
    CONNECTION_LOST = 1
    PERMISSION_ERROR = 2
    PORT_BUSY = 3
    PHYSICAL_ADDRESS_ERROR = 4
    TV_POLL_FAILED = 5


_KEY_MAP: dict[int, str] = {
    UserControlCode.SELECT: KEY_SELECT,
    UserControlCode.UP: KEY_UP,
    UserControlCode.DOWN: KEY_DOWN,
    UserControlCode.LEFT: KEY_LEFT,
    UserControlCode.RIGHT: KEY_RIGHT,
    UserControlCode.SETUP_MENU: KEY_MENU,
    UserControlCode.PLAY: KEY_PLAY,
    UserControlCode.PAUSE: KEY_PAUSE,
    UserControlCode.STOP: KEY_STOP,
    UserControlCode.EXIT: KEY_BACK,
    UserControlCode.FAST_FORWARD: KEY_SEEKFWD,
    UserControlCode.REWIND: KEY_SEEKBCK,
    UserControlCode.DISPLAY_INFORMATION: KEY_INFO,
    UserControlCode.FORWARD: KEY_NEXT,
    UserControlCode.BACKWARD: KEY_PREV,
    UserControlCode.F1_BLUE: KEY_BLUE,
    UserControlCode.F2_RED: KEY_RED,
    UserControlCode.F3_GREEN: KEY_GREEN,
    UserControlCode.F4_YELLOW: KEY_YELLOW,
    UserControlCode.SUB_PICTURE: KEY_SUBTITLES,
    UserControlCode.ROOT_MENU: KEY_HOME,
    UserControlCode.NUMBER0: KEY_0,
    UserControlCode.NUMBER1: KEY_1,
    UserControlCode.NUMBER2: KEY_2,
    UserControlCode.NUMBER3: KEY_3,
    UserControlCode.NUMBER4: KEY_4,
    UserControlCode.NUMBER5: KEY_5,
    UserControlCode.NUMBER6: KEY_6,
    UserControlCode.NUMBER7: KEY_7,
    UserControlCode.NUMBER8: KEY_8,
    UserControlCode.NUMBER9: KEY_9,
    UserControlCode.ELECTRONIC_PROGRAM_GUIDE: KEY_GUIDE,
}

_DECK_KEYS: dict[int, str] = {
    DeckControlMode.SKIP_FORWARD_WIND: KEY_SEEKFWD,
    DeckControlMode.SKIP_REVERSE_REWIND: KEY_SEEKBCK,
    DeckControlMode.STOP: KEY_STOP,
}

_BUTTON_OPCODES = frozenset(
    {
        Opcode.VENDOR_REMOTE_BUTTON_DOWN,
        Opcode.USER_CONTROL_PRESSED,
        Opcode.USER_CONTROL_RELEASE,
        Opcode.VENDOR_REMOTE_BUTTON_UP,
    }
)
_DOWN_OPCODES = frozenset({Opcode.VENDOR_REMOTE_BUTTON_DOWN, Opcode.USER_CONTROL_PRESSED})
_REOPEN_ALERTS = frozenset({Alert.CONNECTION_LOST, Alert.PERMISSION_ERROR, Alert.PORT_BUSY})


def command_string(code: int) -> str:
    """Key name for a remote button code, or "" if the button is not mapped."""
    return _KEY_MAP.get(code, "")


@dataclass(frozen=True)
class CecCommand:
    """A command received on the CEC bus."""

    opcode: int
    parameters: tuple[int, ...] = ()

    def params_description(self) -> str:
        """Describe the parameters, e.g. "2 parameter(s) :[0]=91[1]=A"."""
        items = "".join(f"[{index}]={value:X}" for index, value in enumerate(self.parameters))
        return f"{len(self.parameters)} parameter(s) :{items}"


@dataclass
class CecConfiguration:
    """Settings handed to the adapter library when it is opened."""

    device_name: str = "mediadeck"
    activate_source: bool = False
    hdmi_port: int = 0
    device_types: list[int] = field(default_factory=lambda: [DEVICE_TYPE_RECORDING_DEVICE])
    autodetect_address: bool = False
    physical_address: int = PHYSICAL_ADDRESS_TV
    base_device: int = LOGICAL_ADDRESS_AUDIOSYSTEM


class CecAdapter(Protocol):
    def init_video_standalone(self) -> None: ...

    def detect_adapters(self, max_count: int) -> Sequence[str]: ...

    def open(self, port: str) -> bool: ...

    def close(self) -> None: ...

    def destroy(self) -> None: ...


class PowerControl(Protocol):
    def can_suspend(self) -> bool: ...

    def suspend(self) -> object: ...

    def can_power_off(self) -> bool: ...

    def power_off(self) -> object: ...


class StoppableTimer(Protocol):
    def stop(self) -> None: ...


AdapterFactory = Callable[[CecConfiguration], "CecAdapter | None"]
TimerFactory = Callable[[float, Callable[[], object]], StoppableTimer]


class _PeriodicTimer:
    """Calls a function every ``interval`` seconds on a background thread."""

    def __init__(self, interval: float, callback: Callable[[], object]) -> None:
        self._interval = interval
        self._callback = callback
        self._event = threading.Event()
        threading.Thread(target=self._run, daemon=True).start()

    def _run(self) -> None:
        while not self._event.wait(self._interval):
            self._callback()

    def stop(self) -> None:
        self._event.set()


class CecWorker:
    """Talks to the CEC adapter and turns bus traffic into key events."""

    def __init__(
        self,
        adapter_factory: AdapterFactory,
        *,
        power: PowerControl | None = None,
        verbose_logging: bool = False,
        activate_source: bool = False,
        hdmi_port: int = 0,
        use_key_up_down: bool = False,
        suspend_on_standby: bool = False,
        poweroff_on_standby: bool = False,
        timer_factory: TimerFactory = _PeriodicTimer,
    ) -> None:
        self.adapter_factory = adapter_factory
        self.power = power
        self.verbose_logging = verbose_logging
        self.activate_source = activate_source
        self.hdmi_port = hdmi_port
        self.use_key_up_down = use_key_up_down
        self.suspend_on_standby = suspend_on_standby
        self.poweroff_on_standby = poweroff_on_standby
        self.configuration = CecConfiguration()
        self.adapter: CecAdapter | None = None
        self.adapter_port = ""
        self.listeners: list[InputListener] = []
        self._timer_factory = timer_factory
        self._timer: StoppableTimer | None = None

    def _send(self, keycode: str, state: KeyState) -> None:
        for listener in list(self.listeners):
            listener(CEC_INPUT_NAME, keycode, state)

    def init(self) -> bool:
        """Open the adapter library and start watching for adapters."""
        self.configuration = CecConfiguration(
            activate_source=self.activate_source,
            hdmi_port=self.hdmi_port,
        )
        self.adapter = self.adapter_factory(self.configuration)
        if self.adapter is None:
            log.error("Unable to initialize libCEC.")
            return False

        log.info("CEC library was successfully initialized")
        self.adapter.init_video_standalone()
        self.check_adapter()
        self._timer = self._timer_factory(ADAPTER_CHECK_INTERVAL, self.check_adapter)
        return True

    def close(self) -> None:
        """Stop watching adapters and release the adapter library."""
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        if self.adapter is not None:
            log.debug("Closing libCEC.")
            self.close_adapter()
            self.adapter.destroy()
            self.adapter = None

    def open_adapter(self) -> bool:
        """Open the first adapter found; return whether it opened."""
        if self.adapter is None:
            return False
        devices = list(self.adapter.detect_adapters(MAX_ADAPTERS))
        if not devices:
            return False

        log.info("libCEC found %d CEC adapters.", len(devices))
        self.adapter_port = devices[0]
        if self.adapter.open(self.adapter_port):
            log.info("Device %s was successfully opened", self.adapter_port)
            return True
        log.error("Opening device %s failed", self.adapter_port)
        return False

    def close_adapter(self) -> None:
        """Forget the open adapter so the next check reopens it."""
        self.adapter_port = ""

    def check_adapter(self) -> None:
        """Reopen the adapter if none is currently open."""
        if not self.adapter_port:
            if self.adapter is not None:
                self.adapter.close()
            self.open_adapter()

    def log_message(self, level: int, message: str) -> None:
        """Forward a message from the adapter library to the log."""
        if level == LogLevel.ERROR:
            log.error("libCEC ERROR: %s", message)
        elif level == LogLevel.WARNING:
            log.warning("libCEC WARNING: %s", message)
        elif level == LogLevel.NOTICE:
            log.info("libCEC NOTICE: %s", message)
        elif level == LogLevel.DEBUG and self.verbose_logging:
            log.debug("libCEC DEBUG: %s", message)

    def _key(self, keycode: str, down: bool) -> None:
        if self.use_key_up_down:
            self._send(keycode, KeyState.KEY_DOWN if down else KeyState.KEY_UP)
        elif down:
            self._send(keycode, KeyState.KEY_PRESSED)

    def handle_command(self, command: CecCommand) -> None:
        """React to a command received on the bus."""
        opcode = command.opcode
        params = command.parameters
        if self.verbose_logging:
            log.debug("CecCommand received %X, %s", opcode, command.params_description())

        if opcode == Opcode.PLAY:
            self._send(KEY_PLAY, KeyState.KEY_PRESSED)
        elif opcode == Opcode.DECK_CONTROL:
            if params:
                keycode = _DECK_KEYS.get(params[0], "")
                if keycode:
                    # No up and down events exist for these, so report a press.
                    self._send(keycode, KeyState.KEY_PRESSED)
        elif opcode in _BUTTON_OPCODES:
            down = opcode in _DOWN_OPCODES
            if self.verbose_logging:
                log.debug(
                    "CecCommand button (Down= %s) %s", down, command.params_description()
                )
            if not params:
                return
            if down and params[0] == UserControlCode.AN_RETURN:
                self._key(KEY_BACK, down)
                return
            keycode = command_string(params[0])
            if keycode:
                self._key(keycode, down)
        elif opcode in (Opcode.GIVE_OSD_NAME, Opcode.GIVE_PHYSICAL_ADDRESS):
            pass
        elif opcode == Opcode.STANDBY:
            log.debug("CecCommand : Got a standby Request")
            power = self.power
            if power is None:
                return
            if self.suspend_on_standby and power.can_suspend():
                power.suspend()
            elif self.poweroff_on_standby and power.can_power_off():
                power.power_off()
        else:
            log.debug(
                "Unhandled CEC command %s, %s", opcode, command.params_description()
            )

    def handle_alert(self, alert: int) -> bool:
        """React to an adapter alert; return whether the adapter will be reopened."""
        try:
            name = Alert(alert).name
        except ValueError:
            return False
        if alert == Alert.SERVICE_DEVICE or alert in _REOPEN_ALERTS:
            log.error("libCEC : Alert %s", name)
        if alert not in _REOPEN_ALERTS:
            return False
        log.debug("libCEC : Reopening adapter")
        self.close_adapter()
        return True


class InputCEC(InputBase):
    """Input source fed by an HDMI-CEC adapter."""

    def __init__(self, worker: CecWorker) -> None:
        super().__init__()
        self.worker = worker
        worker.listeners.append(self.emit)

    def init_input(self) -> bool:
        return self.worker.init()

    def input_name(self) -> str:
        return CEC_INPUT_NAME

    def close(self) -> None:
        self.worker.close()