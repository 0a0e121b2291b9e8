"""Main CLI application using Cyclopts.

`whitelist` is a thin HTTP client talking to a running server; `admin`
works on the database directly since no admin exists on a fresh install.
"""

import cyclopts

from idgate.cli.commands import admin, serve, whitelist

app = cyclopts.App(
    name="idgate",
    help="idgate - OAuth identity gateway",
)

app.command(serve.app, name="serve")
app.command(whitelist.app, name="whitelist")
app.command(admin.app, name="admin")
