"""Entry point for running the replkit demo as a module.

This allows running: python -m replkit
"""

from .cli import main

if __name__ == "__main__":
    main()
