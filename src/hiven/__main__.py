"""Allow `python -m hiven` to launch the client."""

from hiven.main import cli

cli()
