"""defgen - generate Python definitions from the code that uses them."""

try:
    from importlib.metadata import version

    __version__ = version("defgen")
except Exception:
    __version__ = "0.0.0.dev0+local"  # Fallback for development
