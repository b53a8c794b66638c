# caimport/utils/files.py

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging
import os
import tempfile

from caimport.services.errors import ErrorKind, ValidationError, WriteError

log = logging.getLogger(__name__)

StrPath = Union[str, Path]

def read_bytes(path: StrPath) -> bytes:
    """Read a file as bytes; raises an OSError with a readable message on failure."""
    file_path = Path(path)

    try:
        return file_path.read_bytes()
    except FileNotFoundError as e:
        raise FileNotFoundError(f"File '{file_path}' not found.") from e
    except PermissionError as e:
        raise PermissionError(f"Permission denied for file '{file_path}'.") from e
    except IsADirectoryError as e:
        raise IsADirectoryError(f"Path '{file_path}' is a directory.") from e
    except OSError as err:
        raise OSError(f"I/O error while reading file '{file_path}': {err}") from err

def validate_input_paths(paths: Iterable[Optional[StrPath]]) -> List[ValidationError]:
    """
    Check that every given input path exists and can be opened for reading.

    Args:
        paths: Input paths. None entries are optional inputs and are skipped.

    Returns:
        A FileNotFound or FileNotReadable error for each failing path, in order.
    """
    errors: List[ValidationError] = []

    for path in paths:
        if path is None:
            continue

        file_path = Path(path)

        try:
            file_path.stat()
        except (FileNotFoundError, NotADirectoryError):
            errors.append(ValidationError(
                ErrorKind.FILE_NOT_FOUND,
                f"Could not find '{file_path}'",
                file_path,
            ))
            continue
        except OSError as err:
            log.debug("Unable to stat %s: %s", file_path, err)
            errors.append(ValidationError(
                ErrorKind.FILE_NOT_READABLE,
                f"Could not read '{file_path}': {err.strerror}",
                file_path,
            ))
            continue

        try:
            with file_path.open('rb'):
                pass
        except OSError as err:
            log.debug("Unable to open %s for reading: %s", file_path, err)
            errors.append(ValidationError(
                ErrorKind.FILE_NOT_READABLE,
                f"Could not read '{file_path}'",
                file_path,
            ))

    return errors

def check_destination_conflicts(paths: Iterable[StrPath]) -> List[ValidationError]:
    """
    Report every destination path that already exists.

    Dangling symlinks count as existing, since writing through them would
    still clobber something. A path that cannot be inspected is reported as
    a conflict too, since it may well exist.
    """
    errors: List[ValidationError] = []

    for path in paths:
        file_path = Path(path)

        try:
            file_path.lstat()
        except (FileNotFoundError, NotADirectoryError):
            continue
        except OSError as err:
            log.debug("Unable to stat %s: %s", file_path, err)
            errors.append(ValidationError(
                ErrorKind.DESTINATION_EXISTS,
                f"Could not check for an existing file at '{file_path}': {err.strerror}",
                file_path,
            ))
            continue

        errors.append(ValidationError(
            ErrorKind.DESTINATION_EXISTS,
            f"Existing file at '{file_path}'",
            file_path,
        ))

    return errors

def write_bytes(
    path: StrPath,
    data: bytes,
    *,
    overwrite: bool = False,
    mode: int = 0o600,
) -> bool:
    """
    Atomically write bytes to a file.

    The data is written to a temp file in the destination directory, fsynced,
    given its final mode and then moved into place, so a partially written
    file is never visible under the final name.

    Args:
        path: Destination file path. The parent directory must exist.
        data: Bytes to write.
        overwrite: If False, an existing file is left untouched.
        mode: File permission mode to apply to the written file.

    Returns:
        True if the file was written, False if it already existed and
        overwrite was False.

    Raises:
        WriteError: If the file could not be written.
    """
    file_path = Path(path)
    parent = file_path.parent
    tmp_name: Optional[str] = None

    try:
        with tempfile.NamedTemporaryFile(delete=False, dir=str(parent),
                                         prefix=f'.{file_path.name}.') as tmp:
            tmp_name = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())

        os.chmod(tmp_name, mode)

        if overwrite:
            os.replace(tmp_name, file_path)
            tmp_name = None
        else:
            # link() refuses to replace an existing entry
            try:
                os.link(tmp_name, file_path)
            except FileExistsError:
                log.debug("Leaving existing file %s in place", file_path)
                return False

        # fsync the containing directory so the rename is durable
        dir_fd = os.open(str(parent), os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)

        return True

    except PermissionError as e:
        raise WriteError(f"Permission denied for file '{file_path}'.", file_path) from e
    except IsADirectoryError as e:
        raise WriteError(f"Path '{file_path}' is a directory.", file_path) from e
    except FileNotFoundError as e:
        raise WriteError(f"Path '{file_path}' not found.", file_path) from e
    except OSError as err:
        raise WriteError(f"I/O error while writing file '{file_path}': {err}", file_path) from err
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
