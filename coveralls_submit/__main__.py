from coveralls_submit.cli import cli

cli()
