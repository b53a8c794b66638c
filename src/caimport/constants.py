# caimport/constants.py

from __future__ import annotations

"""
Standardised exit codes for caimport CLI commands.

0 = success
1 = validation errors (any import stage reported errors)
2 = fatal errors (unsupported args, unhandled exceptions)
"""
EXIT_OK: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_FATAL: int = 2

# ---- ANSI Colour Codes ----
COLOUR = {
    'red': '\033[31m',
    'green': '\033[32m',
    'yellow': '\033[33m',
    'cyan': '\033[36m',
    'bold_red': '\033[1;31m',
    'bold_green': '\033[1;32m',
    'bold_yellow': '\033[1;33m',
    'bold_white': '\033[1;37m',
    'underline_white': '\033[4;37m',
    'reset': '\033[0m'
}

# Convenience shortcuts
COLOUR_ERROR = COLOUR['bold_red']
COLOUR_OK = COLOUR['green']
COLOUR_BRIGHT = COLOUR['bold_white']
COLOUR_WARNING = COLOUR['bold_yellow']
COLOUR_RESET = COLOUR['reset']

# ---- View defaults ----
STATUS_COLUMN = 90

# ---- File system defaults ----
ARTIFACT_MODE = 0o600
CADIR_MODE = 0o750

SERIAL_SEED = '0x0001'
INVENTORY_SEED = ''

# ---- Settings ----
SETTINGS_SECTIONS = ('main', 'ca')

DESTINATION_SETTINGS = (
    'cacert',
    'cakey',
    'cacrl',
    'serial',
    'cert_inventory',
)

DEFAULT_SETTINGS = {
    'cadir': '$confdir/ca',
    'cacert': '$cadir/ca_crt.pem',
    'cakey': '$cadir/ca_key.pem',
    'cacrl': '$cadir/ca_crl.pem',
    'serial': '$cadir/serial',
    'cert_inventory': '$cadir/inventory.txt',
}

ROOT_CONFDIR = '/etc/caimport'
USER_CONFDIR = '~/.caimport'
CONFIG_FILENAME = 'caimport.conf'

# ---- Messages ----
REPLACE_CA_NOTICE = """\
If you would really like to replace your CA, please delete the existing files first.
Note that any certificates that were issued by this CA will become invalid if you
replace it!"""
