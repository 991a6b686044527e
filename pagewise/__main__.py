from .adapters.inbound.cli.commands import app

app()
