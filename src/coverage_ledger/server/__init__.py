"""HTTP service for Coverage Ledger, built on Starlette and served by uvicorn."""

from __future__ import annotations

from .app import create_app
from .state import LedgerHandle

__all__ = ["create_app", "LedgerHandle"]
