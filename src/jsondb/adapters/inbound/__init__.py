"""Inbound adapters for the JSON database engine.

Inbound adapters turn caller input into domain commands.

Exports:
    Command Parser:
        - CommandParser: Parses command text into ParsedCommand variants
        - CommandDialect: sqlglot dialect the parser lexes with
        - tokenize: The token stream the parser reads
    Template Binder:
        - bind_template: Fragments + values into a placeholder command
        - BoundCommand: Command text plus its values
"""

from jsondb.adapters.inbound.command_parser import (
    CommandDialect,
    CommandParser,
    tokenize,
)
from jsondb.adapters.inbound.template_binder import BoundCommand, bind_template

__all__ = [
    "CommandDialect",
    "CommandParser",
    "tokenize",
    "BoundCommand",
    "bind_template",
]
