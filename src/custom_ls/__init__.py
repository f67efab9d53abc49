from __future__ import annotations

from .lister import Lister
from .listerconfig import ListerConfig
from .listerstore import DescriptionStore

__all__ = [
    "DescriptionStore",
    "Lister",
    "ListerConfig",
]
