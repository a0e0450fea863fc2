"""huludscan: Detect Shai-Hulud 2.0 supply-chain worm artifacts on disk."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
