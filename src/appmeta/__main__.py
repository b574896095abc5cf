"""Allow running as ``python -m appmeta``."""

from appmeta.cli.main import app

app()
