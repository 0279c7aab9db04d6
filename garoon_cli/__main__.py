"""
Package entry point.

Allows running the application via:

    python -m garoon_cli

This simply forwards execution to garoon_cli.cli.main().
"""

from garoon_cli.cli import main

if __name__ == "__main__":
    main()
