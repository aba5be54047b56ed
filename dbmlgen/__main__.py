# File: dbmlgen/__main__.py
"""
dbmlgen - Module entry point.

Allows running the generator directly via::

    python -m dbmlgen --schema schema.yaml --output schema.dbml

This module simply delegates to the CLI entry point defined in ``dbmlgen.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from dbmlgen.cli import main as cli_main
    cli_main()


if __name__ == "__main__":
    main()
