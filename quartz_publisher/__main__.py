"""Entry point for ``python -m quartz_publisher``."""

from quartz_publisher.cli import main

if __name__ == "__main__":
    main()
