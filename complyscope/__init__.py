"""complyscope: assessment scope resolution and plan filtering."""

__version__ = "0.1.0"
