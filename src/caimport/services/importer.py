# caimport/services/importer.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from caimport.constants import REPLACE_CA_NOTICE
from caimport.services.errors import ErrorList, MaterializationError
from caimport.services.identity import CaIdentity, IdentityLoader
from caimport.services.materializer import Materializer
from caimport.services.settings import DestinationResolver, DestinationSet
from caimport.utils.files import check_destination_conflicts, validate_input_paths
from caimport.utils.formatting import Reporter

log = logging.getLogger(__name__)


class Stage(Enum):
    VALIDATING_INPUTS = "validating inputs"
    LOADING_IDENTITY = "loading identity"
    RESOLVING_DESTINATIONS = "resolving destinations"
    CHECKING_CONFLICTS = "checking conflicts"
    MATERIALIZING = "materializing"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STAGES = frozenset({Stage.DONE, Stage.FAILED})


@dataclass(frozen=True)
class ImportRequest:
    cert_bundle: Path
    private_key: Path
    crl_chain: Path
    config: Optional[Path] = None


@dataclass(frozen=True)
class ImportOutcome:
    """ What an import run ended with """
    stage: Stage
    failed_stage: Optional[Stage] = None
    errors: ErrorList = ()
    notice: Optional[str] = None
    destinations: Optional[DestinationSet] = None
    written: Tuple[Path, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.stage is Stage.DONE


class CAImporter:
    """
    Imports a CA identity into a CA directory.

    Runs the stages in order, stopping at the first stage that reports errors.
    Only the materializing stage touches the file system, and it can only be
    entered once every earlier stage has passed.
    """

    def __init__(self,
                 reporter: Reporter,
                 loader: Optional[IdentityLoader] = None,
                 resolver: Optional[DestinationResolver] = None,
                 materializer: Optional[Materializer] = None):
        self.reporter = reporter
        self.loader = loader or IdentityLoader()
        self.resolver = resolver or DestinationResolver()
        self.materializer = materializer or Materializer()

        self._transitions: Dict[Stage, Callable[[ImportRequest], Stage]] = {
            Stage.VALIDATING_INPUTS: self._validate_inputs,
            Stage.LOADING_IDENTITY: self._load_identity,
            Stage.RESOLVING_DESTINATIONS: self._resolve_destinations,
            Stage.CHECKING_CONFLICTS: self._check_conflicts,
            Stage.MATERIALIZING: self._materialize,
        }
        self._reset()

    def _reset(self) -> None:
        self._stage: Stage = Stage.VALIDATING_INPUTS
        self._failed_stage: Optional[Stage] = None
        self._errors: ErrorList = ()
        self._notice: Optional[str] = None
        self._identity: Optional[CaIdentity] = None
        self._destinations: Optional[DestinationSet] = None
        self._written: Tuple[Path, ...] = ()

    def run(self, request: ImportRequest) -> ImportOutcome:
        """
        Run one import.

        Returns:
            ImportOutcome with stage DONE, or FAILED plus the failing stage's errors.
        """
        self._reset()
        stage = Stage.VALIDATING_INPUTS

        while stage not in TERMINAL_STAGES:
            log.debug("Import stage: %s", stage.value)
            self._stage = stage
            stage = self._transitions[stage](request)

        outcome = ImportOutcome(
            stage=stage,
            failed_stage=self._failed_stage,
            errors=self._errors,
            notice=self._notice,
            destinations=self._destinations,
            written=self._written,
        )
        self._report(outcome)

        return outcome

    def _fail(self, errors: ErrorList, notice: Optional[str] = None) -> Stage:
        log.debug("Stage '%s' failed with %d error(s)", self._stage.value, len(errors))
        self._failed_stage = self._stage
        self._errors = tuple(errors)
        self._notice = notice
        return Stage.FAILED

    # ----------------
    # Transitions
    # ----------------
    def _validate_inputs(self, request: ImportRequest) -> Stage:
        errors = validate_input_paths([
            request.cert_bundle,
            request.private_key,
            request.crl_chain,
            request.config,
        ])
        if errors:
            return self._fail(errors)

        return Stage.LOADING_IDENTITY

    def _load_identity(self, request: ImportRequest) -> Stage:
        result = self.loader.load(request.cert_bundle, request.private_key, request.crl_chain)
        if not result.ok:
            return self._fail(result.errors)

        self._identity = result.identity
        return Stage.RESOLVING_DESTINATIONS

    def _resolve_destinations(self, request: ImportRequest) -> Stage:
        result = self.resolver.resolve(request.config)
        if not result.ok:
            return self._fail(result.errors)

        self._destinations = result.destinations
        return Stage.CHECKING_CONFLICTS

    def _check_conflicts(self, request: ImportRequest) -> Stage:
        errors = check_destination_conflicts(self._destinations.targets())
        if errors:
            return self._fail(errors, notice=REPLACE_CA_NOTICE)

        return Stage.MATERIALIZING

    def _materialize(self, request: ImportRequest) -> Stage:
        if self._identity is None or self._destinations is None:
            raise RuntimeError("Materializing requires a validated identity and destinations")

        try:
            self._written = self.materializer.materialize(self._identity, self._destinations)
        except MaterializationError as err:
            self._written = err.written
            notice = None
            if err.written:
                listing = '\n'.join(f'  {path}' for path in err.written)
                notice = ("The following files were written before the failure and have not "
                          f"been removed. Delete them before retrying the import:\n{listing}")
            return self._fail([err.cause.to_validation_error()], notice=notice)

        return Stage.DONE

    # ----------------
    # Reporting
    # ----------------
    def _report(self, outcome: ImportOutcome) -> None:
        if outcome.ok:
            self.reporter.inform(
                f"Import succeeded. Find your files in {outcome.destinations.cadir}"
            )
            return

        for err in outcome.errors:
            self.reporter.error(str(err))

        if outcome.notice:
            self.reporter.warn(outcome.notice)
