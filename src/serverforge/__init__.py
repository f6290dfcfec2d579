"""Discord bot that designs themed server layouts and applies them to a guild."""

__version__ = "0.1.0"
