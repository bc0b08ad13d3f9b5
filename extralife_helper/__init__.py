"""Console entry point package for the ExtraLife helper service."""

from app import __version__

__all__ = ["__version__"]
