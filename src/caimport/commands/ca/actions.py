# caimport/commands/ca/actions.py

from __future__ import annotations

import logging

import pydantic

from caimport.commands.helpers import option_errors, prune_opts
from caimport.constants import (
    COLOUR_BRIGHT,
    COLOUR_RESET,
    EXIT_OK,
    EXIT_VALIDATION_ERROR,
)
from caimport.models import App, ImportOptions
from caimport.utils.formatting import print_result, title

log = logging.getLogger(__name__)

def handle_ca_import(app: App) -> int:
    title('Importing a Certificate Authority from file', 3)

    try:
        options = prune_opts(ImportOptions, app.args)
    except pydantic.ValidationError as err:
        for message in option_errors(err):
            app.reporter.error(message)
        app.reporter.error('--cert-bundle, --private-key, --crl-chain are required')
        return EXIT_VALIDATION_ERROR

    for label, path in (('Certificate Bundle', options.cert_bundle),
                        ('Private Key', options.private_key),
                        ('CRL Chain', options.crl_chain)):
        title(f'{label} [ {COLOUR_BRIGHT}{path}{COLOUR_RESET} ]', 7)

    outcome = app.importer().run(options.to_request())

    title(f'Importing [ {COLOUR_BRIGHT}CA Identity{COLOUR_RESET} ]', 9)
    print_result(outcome.ok)

    if not outcome.ok:
        log.info("Import failed while %s", outcome.failed_stage.value)
        return EXIT_VALIDATION_ERROR

    return EXIT_OK
