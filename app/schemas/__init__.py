# ruff: noqa: F403, F401
"""Schemas package initialization."""

from .base import *
from .chat import *
from .conversation import *
from .support import *
from .user import *
