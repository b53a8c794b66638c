# caimport/commands/__init__.py

from __future__ import annotations

import argparse

from . import ca

def register_all(subparsers: argparse._SubParsersAction) -> None:
    """
    Register all subcommands here
    """
    ca.register(subparsers)
