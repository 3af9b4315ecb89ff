"""
Entry point for running DocZone as a module.

Usage:
    python -m doczone --help
    python -m doczone features catalogue.pdf --mode line
    python -m doczone info
"""
from .cli import app


if __name__ == "__main__":
    app()
