"""Display mode matching, a component registry and remote-control input sources for a media player front end."""

__version__ = "0.1.0"