"""mparser - Mentions, emoticons and link titles from chat messages."""

try:
    from importlib.metadata import version

    __version__ = version("mparser")
except Exception:
    __version__ = "0.0.0-dev"
