import pytest

from mediadeck.inputs import (
    KEY_0,
    InputBase,
    InputKeyboard,
    InputSocket,
    KeyState,
)


class FakeServer:
    def __init__(self, listening=True):
        self.listening = listening
        self.sent = []

    def listen(self):
        return self.listening

    def send_message(self, message, client):
        self.sent.append((message, client))


def collect(source):
    events = []
    source.connect(lambda *event: events.append(event))
    return events


def test_input_base_is_abstract():
    with pytest.raises(TypeError):
        InputBase()


def test_keyboard_emits_under_keyboard_name():
    keyboard = InputKeyboard()
    events = collect(keyboard)
    keyboard.key_press("Ctrl+F", KeyState.KEY_DOWN)
    assert events == [("Keyboard", "Ctrl+F", KeyState.KEY_DOWN)]
    assert keyboard.input_name() == "Keyboard"
    assert keyboard.init_input() is True


def test_every_listener_is_called():
    keyboard = InputKeyboard()
    first = collect(keyboard)
    second = collect(keyboard)
    keyboard.key_press("Up", KeyState.KEY_UP)
    assert first == second == [("Keyboard", "Up", KeyState.KEY_UP)]


def test_numeric_key_name():
    keyboard = InputKeyboard()
    events = collect(keyboard)
    keyboard.key_press(KEY_0, KeyState.KEY_PRESSED)
    assert events == [("Keyboard", "KEY_NUMERIC_0", KeyState.KEY_PRESSED)]


def test_socket_message_becomes_key_press():
    sock = InputSocket(FakeServer())
    events = collect(sock)
    sock.message_received({"client": "remote-app", "source": "phone", "keycode": "KEY_UP"})
    assert events == [("phone", "KEY_UP", KeyState.KEY_PRESSED)]


@pytest.mark.parametrize(
    "message",
    [
        {"source": "phone", "keycode": "KEY_UP"},
        {"client": "remote-app", "keycode": "KEY_UP"},
        {"client": "remote-app", "source": "phone"},
        ["client", "source", "keycode"],
        None,
    ],
)
def test_socket_ignores_incomplete_messages(message):
    sock = InputSocket(FakeServer())
    events = collect(sock)
    sock.message_received(message)
    assert events == []


def test_socket_welcomes_client_with_version():
    server = FakeServer()
    sock = InputSocket(server, version="9.9.9", build_date="2020-01-02")
    sock.client_connected("client-1")
    assert server.sent == [({"version": "9.9.9", "builddate": "2020-01-02"}, "client-1")]


def test_socket_init_follows_server_listen():
    assert InputSocket(FakeServer(listening=True)).init_input() is True
    assert InputSocket(FakeServer(listening=False)).init_input() is False


def test_socket_name():
    assert InputSocket(FakeServer()).input_name() == "socket"