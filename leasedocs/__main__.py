"""Entry point for python -m leasedocs"""

from leasedocs.cli.main import app

app()
