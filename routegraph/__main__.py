"""Allow running RouteGraph as ``python -m routegraph``."""

from routegraph.cli import main

if __name__ == "__main__":
    main()
