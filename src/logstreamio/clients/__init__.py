"""Concrete RemoteLogAPI implementations."""

from .http import HttpLogAPI, HttpLogAPIConfig

__all__ = ["HttpLogAPI", "HttpLogAPIConfig"]
