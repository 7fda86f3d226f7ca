"""Operations toolkit for the capped, fee-bearing token transfer policy."""

from __future__ import annotations

__version__ = "0.3.0"
