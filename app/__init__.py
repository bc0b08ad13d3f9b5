"""ExtraLife helper: keeps a Twitch channel's category in step with the game being played."""

__version__ = "1.0.0"
