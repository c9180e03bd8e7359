"""Built-in CLI sub-commands for postfetch.

* :mod:`~postfetch.commands.posts` -- ``random``, ``get`` and ``list``,
  registered directly on the root app.
* :mod:`~postfetch.commands.config` -- view and modify persisted settings,
  exported as the ``config`` Typer sub-application.
"""
