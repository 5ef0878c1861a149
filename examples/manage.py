#!/usr/bin/env python
"""Management entrypoint for the django-fest example server.

Run from a source checkout without installing the package::

    python examples/manage.py migrate
    python examples/manage.py bootstrap_fest --config fest.example.toml
    python examples/manage.py runserver
"""

import os
import sys
from pathlib import Path

EXAMPLES_DIR = Path(__file__).resolve().parent


def main() -> None:
    """Run administrative tasks against the example settings."""
    sys.path[:0] = [str(EXAMPLES_DIR), str(EXAMPLES_DIR.parent / "src")]
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "settings")
    from django.core.management import execute_from_command_line

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
