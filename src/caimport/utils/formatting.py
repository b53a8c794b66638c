# caimport/utils/formatting.py

from __future__ import annotations

import logging
import sys
from typing import Protocol

from caimport.constants import COLOUR, COLOUR_BRIGHT, COLOUR_RESET
from caimport.constants import COLOUR_ERROR, COLOUR_OK, COLOUR_WARNING
from caimport.constants import STATUS_COLUMN

log = logging.getLogger(__name__)

def title(text: str, level: int=1, extra=None) -> None:
    """
    Prints a title in a consistant format

    Args:
        text (str): The text to be displayed
        level (int):  The level of heading (optional)
    """

    title_colour = COLOUR['cyan']

    highlight_colour = COLOUR_BRIGHT
    reset = COLOUR_RESET

    if level == 1:
        title_colour = COLOUR['bold_yellow']

        if extra is None:
            extra = '---===oooO'

        print(f'{extra} {title_colour}{text}{reset} {extra[::-1]}\n')

    elif level == 2:
        title_colour = COLOUR['bold_yellow']

        if extra is not None:
            print(f'{title_colour}{text}{reset} [ {highlight_colour}{extra}{reset} ]\n')
        else:
            print(f'{title_colour}{text}{reset}\n')

    elif level == 3:
        title_colour = COLOUR['bold_white']

        print(f'{title_colour}{text}{reset}\n')

    elif level == 7:
        print(f'{text}')

    elif level == 9:
        print(f'{text}...', end='')

    else:
        print(f'{title_colour}{text}{reset}\n')

def print_result(success, *, ok_msg='  OK  ', failed_msg='FAILED') -> bool:
    """
    Prints a ANSI success or failure message in a RedHat theme

    Args:
        success (bool): Success test condition
        ok_msg (str): OK message text
        failed_msg (str): Failed message text
    """

    column = f'\033[{STATUS_COLUMN}G'

    if success:
        msg = ok_msg
        msg_colour = COLOUR_OK
    else:
        msg = failed_msg
        msg_colour = COLOUR_ERROR

    print(f'{column}[ {msg_colour}{msg}{COLOUR_RESET} ]')

    return bool(success)

def error(text: str) -> None:
    """
    Prints an error message with custom formatting.

    Args:
        text (str): The error message to be displayed.
    """

    print(f'{COLOUR_ERROR}Error:{COLOUR_RESET} {text}', file=sys.stderr)

def warning(text: str) -> None:
    """
    Prints a warning message with custom formatting.

    Args:
        text (str): The warning message to be displayed.
    """

    print(f'⚠️ {COLOUR_WARNING}Warning:{COLOUR_RESET} {text}', file=sys.stderr)


class Reporter(Protocol):
    """Where the import pipeline sends operator-facing messages."""

    def inform(self, text: str) -> None: ...

    def warn(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...


class ConsoleReporter:
    """ Reporter that prints in the CLI house style and mirrors to logging """

    def inform(self, text: str) -> None:
        log.debug(text)
        title(text, 7)

    def warn(self, text: str) -> None:
        log.debug(text)
        warning(text)

    def error(self, text: str) -> None:
        log.debug(text)
        error(text)
