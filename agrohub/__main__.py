"""Main entry point when executing agrohub as a package.

This allows running the package using python -m agrohub.
"""

from agrohub.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
