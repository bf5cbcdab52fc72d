"""Multi-camera photo-booth backend with session collage composition."""

__version__ = "0.1.0"
