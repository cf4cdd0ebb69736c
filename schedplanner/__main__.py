"""
Package entry point.

Allows running the application via:

    python -m schedplanner

This simply forwards execution to schedplanner.cli.main().
"""

from schedplanner.cli import main

if __name__ == "__main__":
    main()
