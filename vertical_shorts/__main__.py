"""Package entry point for ``python -m vertical_shorts``."""

from vertical_shorts.cli import main

if __name__ == "__main__":
    main()
