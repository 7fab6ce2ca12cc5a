"""Infrared remote input read from the LIRC daemon's socket."""

from __future__ import annotations

import codecs
import logging
import re
import socket
from typing import Callable

from .inputs import InputBase, KeyState

log = logging.getLogger(__name__)

DEFAULT_LIRC_ADDRESS = "/run/lirc/lircd"
LIRC_INPUT_NAME = "LIRC"
_UP_SUFFIX = "_LIRCUP"
# Only every third burst of a held key is passed on; the rest makes the UI unusable.
_REPEAT_DIVISOR = 3
_RECV_SIZE = 4096
_INT_RE = re.compile(r"[+-]?\d+")

Connector = Callable[[str], socket.socket]


def _connect_unix(address: str) -> socket.socket:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(address)
    except OSError:
        sock.close()
        raise
    return sock


def parse_lirc_line(line: str) -> tuple[str, int, str, str]:
    """Split a daemon line into (code, repeat count, command, remote).

    Raises ValueError if the line does not have exactly four space-separated fields.
    A repeat count that is not a decimal number counts as 0.
    """
    fields = line.rstrip("\r\n").split(" ")
    if len(fields) != 4:
        raise ValueError(f"Unknown LIRC input: {line!r}")
    code, repeat_text, command, remote = fields
    repeat_text = repeat_text.strip()
    repeat = int(repeat_text) if _INT_RE.fullmatch(repeat_text) else 0
    return code, repeat, command, remote


class InputLIRC(InputBase):
    """Key events from the LIRC daemon.

    The owner's event loop watches :meth:`fileno` and calls :meth:`read` when it
    is readable; :meth:`feed` handles data obtained some other way.
    """

    def __init__(
        self,
        address: str = DEFAULT_LIRC_ADDRESS,
        *,
        connector: Connector | None = None,
    ) -> None:
        super().__init__()
        self.address = address
        self._connector = connector or _connect_unix
        self._socket: socket.socket | None = None
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def connected(self) -> bool:
        return self._socket is not None

    def fileno(self) -> int:
        """Descriptor of the daemon socket, or -1 when not connected."""
        return self._socket.fileno() if self._socket is not None else -1

    def init_input(self) -> bool:
        """Connect to the daemon; return whether that worked."""
        self.disconnect()
        try:
            sock = self._connector(self.address)
        except OSError as exc:
            log.error("LIRC Socket Error : %s", exc)
            return False
        sock.setblocking(False)
        self._socket = sock
        log.info("LIRC socket connected")
        return True

    def input_name(self) -> str:
        return LIRC_INPUT_NAME

    def disconnect(self) -> None:
        """Close the daemon socket and drop any partial line."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None
            log.info("LIRC socket disconnected")
        self._buffer = ""
        self._decoder.reset()

    def feed(self, data: bytes | str) -> int:
        """Process daemon output; complete lines become key events.

        Returns the number of key events emitted.
        """
        text = self._decoder.decode(data) if isinstance(data, bytes) else data
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")

        emitted = 0
        for line in lines:
            try:
                _code, repeat, command, remote = parse_lirc_line(line)
            except ValueError as exc:
                log.error("%s", exc)
                continue

            log.info(
                "LIRC Got Key : %s, repeat count: %d, from remote %s", command, repeat, remote
            )
            if repeat % _REPEAT_DIVISOR == 0:
                state = KeyState.KEY_UP if command.endswith(_UP_SUFFIX) else KeyState.KEY_DOWN
                self.emit(LIRC_INPUT_NAME, command, state)
                emitted += 1
        return emitted

    def read(self) -> int:
        """Read whatever the daemon has sent and process it.

        Returns the number of key events emitted. Disconnects if the daemon
        closed the connection or the socket failed.
        """
        if self._socket is None:
            return 0

        chunks: list[bytes] = []
        lost = False
        while True:
            try:
                data = self._socket.recv(_RECV_SIZE)
            except (BlockingIOError, InterruptedError):
                break
            except OSError as exc:
                log.error("LIRC Socket Error : %s", exc)
                lost = True
                break
            if not data:
                lost = True
                break
            chunks.append(data)

        emitted = self.feed(b"".join(chunks))
        if lost:
            self.disconnect()
        return emitted