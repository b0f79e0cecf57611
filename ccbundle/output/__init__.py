# CCBundle Output Module
# Rich console output

from ccbundle.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
