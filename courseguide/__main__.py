"""
Package entry point.

Allows running the application via:

    python -m courseguide

This simply forwards execution to courseguide.cli.main().
"""

from courseguide.cli import main

if __name__ == "__main__":
    main()
