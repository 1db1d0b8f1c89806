"""Allow ``python -m coverage_ledger``."""

from .cli import app

if __name__ == "__main__":
    app()
