"""Client for a personal video-game catalog and review service."""

__version__ = "0.1.0"
