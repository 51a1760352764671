"""Allow ``python -m quarry``."""

from quarry.cli.main import cli

cli()
