"""Allow running as ``python -m todotrack``."""
from todotrack.cli import main

if __name__ == "__main__":
    main()
