"""Command dispatch framework for cloud operations.

Commands are organised in a tree of groups and exposed both through a Typer
CLI and a stdio JSON-RPC tool server; every invocation produces one JSON
response envelope.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
