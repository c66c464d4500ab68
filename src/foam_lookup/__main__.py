"""``python -m foam_lookup``."""

from .cli import run

if __name__ == "__main__":
    run()
