"""Audio package."""

from .sounds import SoundCuePlayer

__all__ = ["SoundCuePlayer"]
