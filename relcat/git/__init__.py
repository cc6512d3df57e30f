"""Git collaborators for relcat."""

from .repository import DATE_FORMAT, GitRepository

__all__ = ["DATE_FORMAT", "GitRepository"]
