# caimport/services/materializer.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

from caimport.constants import ARTIFACT_MODE, CADIR_MODE, INVENTORY_SEED, SERIAL_SEED
from caimport.services.errors import (
    DirectoryCreateError,
    FileSystemWriteError,
    MaterializationError,
    WriteError,
)
from caimport.services.identity import CaIdentity
from caimport.services.settings import DestinationSet
from caimport.utils.files import StrPath, write_bytes

log = logging.getLogger(__name__)


class Materializer:
    """ Writes a validated CA identity into the CA directory """

    def __init__(self, artifact_mode: int = ARTIFACT_MODE, dir_mode: int = CADIR_MODE):
        self.artifact_mode = artifact_mode
        self.dir_mode = dir_mode

    def ensure_directory(self, path: StrPath) -> Path:
        """
        Create the directory and any parents, unless it already exists.

        Raises:
            DirectoryCreateError: If the directory cannot be created.
        """
        dir_path = Path(path)

        try:
            dir_path.mkdir(mode=self.dir_mode, parents=True, exist_ok=True)
        except FileExistsError as e:
            raise DirectoryCreateError(f"Path '{dir_path}' exists and is not a directory.", dir_path) from e
        except OSError as err:
            raise DirectoryCreateError(f"Could not create directory '{dir_path}': {err}", dir_path) from err

        return dir_path

    def write_artifact(self, path: StrPath, content: str, mode: int) -> Path:
        """
        Atomically write an artifact. An existing file is never replaced, even
        one that appeared after the conflict check.

        Raises:
            WriteError: If the artifact cannot be written or already exists.
        """
        file_path = Path(path)
        if not write_bytes(file_path, content.encode('utf-8'), overwrite=False, mode=mode):
            raise WriteError(f"Existing file at '{file_path}' was not replaced.", file_path)
        log.debug("Wrote %s (mode %o)", file_path, mode)
        return file_path

    def ensure_auxiliary_file(self, path: StrPath, default_content: str, mode: int) -> bool:
        """
        Seed a runtime bookkeeping file. An existing file is never overwritten.

        Returns:
            True if the file was created, False if it was already present.

        Raises:
            WriteError: If the file cannot be created.
        """
        file_path = Path(path)
        created = write_bytes(file_path, default_content.encode('utf-8'), overwrite=False, mode=mode)
        log.debug("%s %s", "Seeded" if created else "Kept existing", file_path)
        return created

    def materialize(self, identity: CaIdentity, destinations: DestinationSet) -> Tuple[Path, ...]:
        """
        Write the CA certificate, key and CRLs, then seed the serial and inventory files.

        Writes already made are not rolled back if a later one fails.

        Returns:
            The paths written, in order.

        Raises:
            MaterializationError: Wrapping the write failure and what was written before it.
        """
        written: List[Path] = []
        mode = self.artifact_mode

        try:
            self.ensure_directory(destinations.cadir)

            written.append(self.write_artifact(destinations.cacert, identity.certificate_pem, mode))
            written.append(self.write_artifact(destinations.cakey, identity.private_key_pem, mode))
            written.append(self.write_artifact(destinations.cacrl, identity.crl_pem, mode))

            # The CA runtime expects these files to exist
            if self.ensure_auxiliary_file(destinations.serial, SERIAL_SEED, mode):
                written.append(destinations.serial)
            if self.ensure_auxiliary_file(destinations.cert_inventory, INVENTORY_SEED, mode):
                written.append(destinations.cert_inventory)

        except FileSystemWriteError as err:
            raise MaterializationError(err, written) from err

        return tuple(written)
