"""Built-in management sub-commands for frccli.

* :mod:`~frccli.commands.config` -- view and modify the user configuration.
* :mod:`~frccli.commands.cache` -- inspect and clear the response cache.

The data commands (``season``, ``events``, ``schedule``, ...) live on the
root application in :mod:`frccli.app`.
"""
