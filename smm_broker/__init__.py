"""Order brokering backend for social-media-marketing services."""

__version__ = "0.1.0"
