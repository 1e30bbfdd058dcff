"""Chess rules engine with a fixed-depth minimax opponent."""

from __future__ import annotations

__version__ = "0.1.0"
