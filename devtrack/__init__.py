"""DevTrack: project and ticket tracking API with real-time project rooms."""

__version__ = "1.0.0"
