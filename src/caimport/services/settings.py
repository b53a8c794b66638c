# caimport/services/settings.py

from __future__ import annotations

import configparser
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pydantic
from pydantic import BaseModel, ConfigDict, field_validator

from caimport.constants import (
    CONFIG_FILENAME,
    DEFAULT_SETTINGS,
    DESTINATION_SETTINGS,
    ROOT_CONFDIR,
    SETTINGS_SECTIONS,
    USER_CONFDIR,
)
from caimport.services.errors import ErrorKind, ErrorList, ValidationError
from caimport.utils.files import StrPath

log = logging.getLogger(__name__)

_VARIABLE = re.compile(r'\$(?:\{(\w+)\}|(\w+))')


class DestinationSet(BaseModel):
    """
    Absolute destination paths for one import run.
    """
    model_config = ConfigDict(frozen=True)

    cacert: Path
    cakey: Path
    cacrl: Path
    serial: Path
    cert_inventory: Path
    cadir: Path

    @field_validator('*')
    @classmethod
    def _must_be_absolute(cls, value: Path) -> Path:
        if not value.is_absolute():
            raise ValueError(f"must be an absolute path, got '{value}'")
        return value

    def targets(self) -> Tuple[Path, ...]:
        """The five file targets, in write order."""
        return tuple(getattr(self, name) for name in DESTINATION_SETTINGS)


@dataclass(frozen=True)
class Resolved:
    destinations: DestinationSet

    ok = True


@dataclass(frozen=True)
class Unresolved:
    errors: ErrorList

    ok = False


SettingsResult = Union[Resolved, Unresolved]


class _InterpolationError(Exception):
    pass


def default_confdir() -> Path:
    if hasattr(os, 'geteuid') and os.geteuid() == 0:
        return Path(ROOT_CONFDIR)
    return Path(USER_CONFDIR).expanduser()

def _config_error(message: str, path: Optional[Path] = None) -> ValidationError:
    return ValidationError(ErrorKind.CONFIGURATION, message, path)

def _read_settings_file(config_path: Path) -> Dict[str, str]:
    parser = configparser.ConfigParser(interpolation=None)

    with config_path.open('r', encoding='utf-8') as handle:
        parser.read_file(handle)

    settings: Dict[str, str] = {}
    for section in SETTINGS_SECTIONS:
        if parser.has_section(section):
            settings.update(parser.items(section))

    return settings

def _interpolate(name: str, raw: Dict[str, str], resolving: Tuple[str, ...] = ()) -> str:
    if name in resolving:
        chain = ' -> '.join((*resolving, name))
        raise _InterpolationError(f"Setting '{resolving[0]}' has a circular reference ({chain})")

    if name not in raw:
        raise _InterpolationError(f"Setting '{resolving[-1]}' refers to unknown setting '${name}'")

    def substitute(match: re.Match) -> str:
        ref = match.group(1) or match.group(2)
        return _interpolate(ref, raw, (*resolving, name))

    return _VARIABLE.sub(substitute, raw[name])

def resolve_destinations(config_path: Optional[StrPath] = None,
                         *,
                         confdir: Optional[StrPath] = None) -> SettingsResult:
    """
    Resolve the CA destination paths from the settings file.

    The [main] section is applied first and [ca] overrides it. Values may refer
    to other settings as $name or ${name}. Without an explicit config path the
    default file under confdir is used if present, otherwise built-in defaults.

    Args:
        config_path: Settings file to read. Optional.
        confdir: Base configuration directory. Defaults by effective user.

    Returns:
        Resolved(destinations), or Unresolved(errors) with every problem found.
    """
    confdir = Path(confdir) if confdir is not None else default_confdir()
    raw: Dict[str, str] = {'confdir': str(confdir), **DEFAULT_SETTINGS}

    if config_path is None:
        candidate = confdir / CONFIG_FILENAME
        config_path = candidate if candidate.is_file() else None

    if config_path is not None:
        config_path = Path(config_path)
        log.debug("Reading settings from %s", config_path)
        try:
            raw.update(_read_settings_file(config_path))
        except configparser.Error as err:
            return Unresolved(errors=(
                _config_error(f"Could not parse config file '{config_path}': {err}", config_path),
            ))
        except (OSError, UnicodeDecodeError) as err:
            return Unresolved(errors=(
                _config_error(f"Could not read config file '{config_path}': {err}", config_path),
            ))

    errors: List[ValidationError] = []
    resolved: Dict[str, str] = {}

    for name in ('cadir', *DESTINATION_SETTINGS):
        try:
            resolved[name] = os.path.expanduser(_interpolate(name, raw))
        except _InterpolationError as err:
            errors.append(_config_error(str(err), config_path))

    if errors:
        return Unresolved(errors=tuple(errors))

    try:
        destinations = DestinationSet(**resolved)
    except pydantic.ValidationError as err:
        return Unresolved(errors=tuple(
            _config_error(f"Setting '{detail['loc'][0]}' {detail['msg'].removeprefix('Value error, ')}",
                          config_path)
            for detail in err.errors()
        ))

    log.debug("Resolved destinations under %s", destinations.cadir)
    return Resolved(destinations=destinations)


class DestinationResolver:
    """Resolver capability injected into the importer; wraps resolve_destinations()."""

    def __init__(self, confdir: Optional[StrPath] = None):
        self.confdir = confdir

    def resolve(self, config_path: Optional[StrPath] = None) -> SettingsResult:
        return resolve_destinations(config_path, confdir=self.confdir)
