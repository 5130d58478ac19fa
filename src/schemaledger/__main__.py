from schemaledger.cli import app

app()
