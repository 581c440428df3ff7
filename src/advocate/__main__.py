"""Advocate CLI entry point."""

from advocate.cli import app

if __name__ == "__main__":
    app()
