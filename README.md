# mediadeck

Building blocks for the host side of a living-room media player:

* **Display modes**: describe the displays and video modes of a machine,
  pick the mode that best fits a video's frame rate, pick the best overall
  mode for a screen, and switch back afterwards.
* **Components**: a small registry that initialises named components and
  exposes the exported ones to a web channel.
* **Input sources**: keyboard, local socket, HDMI-CEC, LIRC and joystick
  sources that report key events to callbacks.

The package depends only on the standard library. The `test` extra installs
pytest for running the test suite.

## Display modes

`mediadeck.display` holds the data model (`VideoMode`, `Display`,
`MatchMediaInfo`), the helper `is_rate_multiple_of`, and the abstract
`DisplayManager`. A backend subclasses `DisplayManager` and provides
`set_display_mode`, `get_current_display_mode`, `get_main_display` and
`get_display_from_point`; validation (`is_valid_display`,
`is_valid_display_mode`), `get_current_video_mode`, best-match scoring
(`find_best_match`) and best-overall selection (`find_best_mode`) are shared.

`mediadeck.dummy.DummyDisplayManager` is a ready-made backend with a single
1280x720 display whose modes can be switched freely:

```python
from mediadeck.display import MatchMediaInfo
from mediadeck.dummy import DummyDisplayManager

manager = DummyDisplayManager()
manager.initialize()          # one display with a 60 Hz mode
manager.add_mode(24.0)
manager.add_mode(50.0)

best = manager.find_best_match(0, MatchMediaInfo(23.976, False), False)
print(manager.displays[0].video_modes[best].pretty_name())
```

`find_best_match` scores every mode: same resolution and depth as the
current mode (1000), exact refresh rate (200), exact multiple of the video
rate (75), rate within half a hertz (50), approximate multiple (25), matching
interlacing (10), and being the current mode (5). The highest score wins if
it is above 1000; otherwise it returns -1. With `avoid_25_30=True`, modes
within half a hertz of 25 Hz or 30 Hz are skipped.

`find_best_mode` prefers progressive modes, then higher depth, width,
height and refresh rate.

### Display component

`mediadeck.display_component.DisplayComponent` wraps a manager with what a
player needs:

* `switch_to_best_video_mode(frame_rate)` before playback, remembering the
  mode in use, and `restore_previous_video_mode()` afterwards;
* `switch_to_best_overall_video_mode(display)`, which does nothing unless
  the component was created with `hdmi_poweron=True`;
* `current_refresh_rate()` and `debug_information()`;
* `switch_command(command)`, taking a space-separated request such as
  `"1920x1080 p 24hz"`, `"i"` or `"mode=3"` and switching to the closest
  matching mode;
* `monitor_change()`, which schedules a single re-initialisation one second
  later (through the `scheduler` given to the constructor, or a background
  timer).

The component finds "its" display from the centre of the window geometry
given to `set_application_window(Rect(x, y, width, height))`.
`component_post_initialize(registry)` registers the `switch` and
`recreateRpiUI` host commands on any object with a
`register_host_command(command, function)` method.

## Components

`mediadeck.components.ComponentManager` registers `Component` objects by
name. `register_component` skips duplicates and components whose
`component_initialize()` fails; `initialize(components)` registers them in
order and then calls `component_post_initialize()` on every registered one;
`set_web_channel(channel)` calls `channel.register_object(name, component)`
for each component whose `component_export()` is true; `get(name)` returns a
registered component or raises `KeyError`.

## Input sources

Sources derive from `mediadeck.inputs.InputBase`. Callbacks added with
`connect(callback)` receive `(source, keycode, KeyState)` for every key;
`KeyState` is `KEY_DOWN`, `KEY_UP` or `KEY_PRESSED`. Well-known key names
such as `KEY_PLAY` and `KEY_BACK` are constants in `mediadeck.inputs`.

* `InputKeyboard`: `key_press(keys, state)` reports a key from the UI.
* `InputSocket(server)`: works with any object offering `listen()` and
  `send_message(message, client)`. `client_connected` greets a client with
  the version and build date; `message_received` turns a mapping with
  `client`, `source` and `keycode` into a `KEY_PRESSED` event.
* `mediadeck.cec.InputCEC(worker)`: a `CecWorker` is given a factory that
  returns an adapter object (`init_video_standalone`, `detect_adapters`,
  `open`, `close`, `destroy`). `handle_command(CecCommand(...))` maps remote
  buttons, play and deck-control commands to keys, and on standby can
  suspend or power off through an optional power object;
  `handle_alert(alert)` drops the adapter so the periodic check reopens it.
* `mediadeck.lirc.InputLIRC(address)`: connects to the LIRC daemon socket
  (`/run/lirc/lircd` by default). Call `read()` when `fileno()` is readable,
  or pass data to `feed()`. Only every third repeat of a held key is
  reported; commands ending in `_LIRCUP` are key-up events.
  `parse_lirc_line` splits one daemon line.
* `mediadeck.joystick.InputJoystick(backend)`: polls a backend offering
  `init`, `joysticks`, `poll` and `quit` on a background thread.
  `JoystickTranslator` turns `ButtonEvent`, `HatEvent` and `AxisEvent` into
  `KEY_BUTTON_<n>`, `KEY_HAT_<direction>` and `KEY_AXIS_<n>_UP/DOWN` keys.

## What the package does not do

* It has no display backends for real platforms; only the dummy manager is
  included. Switching modes on actual hardware needs a `DisplayManager`
  subclass of your own.
* It does not load input maps or turn key events into actions, and has no
  host-command dispatcher; connect your own callbacks to the input sources.
* It does not install signal handlers.
* It does not talk to CEC adapters, the joystick subsystem or a JSON socket
  server by itself: those are passed in as objects with the methods listed
  above. Only the LIRC source opens its own socket.
* There is no command-line program.