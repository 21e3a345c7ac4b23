"""
Entry point for running iplusone as a module.

Usage:
    python -m iplusone next
    python -m iplusone study
    python -m iplusone --help
"""
from .cli import main

if __name__ == "__main__":
    main()
