# caimport/models/app.py

import logging
from argparse import Namespace
from dataclasses import dataclass

from caimport.services.importer import CAImporter
from caimport.utils.formatting import ConsoleReporter, Reporter

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class App:
    """
    Lightweight application context passed to all handlers.
    Holds the parsed arguments and the reporter the pipeline writes to.
    """
    args: Namespace
    reporter: Reporter

    @classmethod
    def from_args(cls, args: Namespace) -> "App":
        log.debug("Building app context for command: %s", getattr(args, "command", None))
        return cls(args=args, reporter=ConsoleReporter())

    def importer(self) -> CAImporter:
        return CAImporter(reporter=self.reporter)
