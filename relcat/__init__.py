"""Release and component catalogue builder for git histories."""

__version__ = "0.1.0"
