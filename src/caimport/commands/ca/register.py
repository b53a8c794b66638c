# caimport/commands/ca/register.py

from __future__ import annotations

import argparse

from .actions import handle_ca_import
from caimport.constants import EXIT_OK
from caimport.models import App

IMPORT_DESCRIPTION = """\
Given a private key, cert bundle, and a crl chain, validate and import them
into the CA directory.

To determine the target location the default caimport.conf is consulted for
custom values. If using a custom caimport.conf provide it with the --config flag.

Existing CA files are never replaced. Do not run more than one import against
the same CA directory at a time.
"""


def _add_import_subcommand(actions: argparse._SubParsersAction) -> argparse.ArgumentParser:
    """
    Register `ca import`
    """

    parser = actions.add_parser('import',
        help="Import the CA's key, certs, and crls",
        description=IMPORT_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--config',
        required=False,
        metavar='CONF',
        help='Path to caimport.conf'
    )
    parser.add_argument('--private-key',
        required=False,
        metavar='KEY',
        help='Path to PEM encoded key'
    )
    parser.add_argument('--cert-bundle',
        required=False,
        metavar='BUNDLE',
        help='Path to PEM encoded bundle'
    )
    parser.add_argument('--crl-chain',
        required=False,
        metavar='CHAIN',
        help='Path to PEM encoded chain'
    )
    parser.set_defaults(handler=handle_ca_import, subcommand="import")

    return parser

def register(subparsers: argparse._SubParsersAction) -> None:
    """
    Register the `ca` command and its actions.
    """
    parser = subparsers.add_parser(
        'ca',
        add_help=True,
        help='Perform Certificate Authority actions',
    )

    actions = parser.add_subparsers(
        title='Actions',
        dest='action',
    )

    _add_import_subcommand(actions)

    parser.set_defaults(handler=_show_help, _parser=parser)

def _show_help(app: App):
    app.args._parser.print_help()
    return EXIT_OK
