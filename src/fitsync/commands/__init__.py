"""CLI commands for fitsync."""

from .chat import chat
from .init import init
from .plans import nutrition, plans
from .prefs import prefs
from .progress import exercises, progress
from .status import login, status, sync, watch

__all__ = [
    "chat",
    "exercises",
    "init",
    "login",
    "nutrition",
    "plans",
    "prefs",
    "progress",
    "status",
    "sync",
    "watch",
]
