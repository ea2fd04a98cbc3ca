"""Main entry point when executing seaplanecli as a package.

This allows running the package using python -m seaplanecli.
"""

from seaplanecli.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
