# caimport/services/errors.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence


class ErrorCategory(str, Enum):
    """Taxonomy an error belongs to. Each import stage reports one category."""
    INPUT_PATH = "InputPathError"
    IDENTITY_VALIDATION = "IdentityValidationError"
    CONFIGURATION = "ConfigurationError"
    DESTINATION_CONFLICT = "DestinationConflictError"
    FILE_SYSTEM_WRITE = "FileSystemWriteError"


class ErrorKind(str, Enum):
    FILE_NOT_FOUND = "FileNotFound"
    FILE_NOT_READABLE = "FileNotReadable"
    EMPTY_CERT_BUNDLE = "EmptyCertBundle"
    INVALID_CERTIFICATE = "InvalidCertificate"
    INVALID_KEY_MATERIAL = "InvalidKeyMaterial"
    INVALID_CRL = "InvalidCrl"
    KEY_CERT_MISMATCH = "KeyCertMismatch"
    CRL_ISSUER_MISMATCH = "CrlIssuerMismatch"
    CONFIGURATION = "Configuration"
    DESTINATION_EXISTS = "DestinationExists"
    DIRECTORY_CREATE = "DirectoryCreateError"
    WRITE = "WriteError"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]


_CATEGORIES = {
    ErrorKind.FILE_NOT_FOUND: ErrorCategory.INPUT_PATH,
    ErrorKind.FILE_NOT_READABLE: ErrorCategory.INPUT_PATH,
    ErrorKind.EMPTY_CERT_BUNDLE: ErrorCategory.IDENTITY_VALIDATION,
    ErrorKind.INVALID_CERTIFICATE: ErrorCategory.IDENTITY_VALIDATION,
    ErrorKind.INVALID_KEY_MATERIAL: ErrorCategory.IDENTITY_VALIDATION,
    ErrorKind.INVALID_CRL: ErrorCategory.IDENTITY_VALIDATION,
    ErrorKind.KEY_CERT_MISMATCH: ErrorCategory.IDENTITY_VALIDATION,
    ErrorKind.CRL_ISSUER_MISMATCH: ErrorCategory.IDENTITY_VALIDATION,
    ErrorKind.CONFIGURATION: ErrorCategory.CONFIGURATION,
    ErrorKind.DESTINATION_EXISTS: ErrorCategory.DESTINATION_CONFLICT,
    ErrorKind.DIRECTORY_CREATE: ErrorCategory.FILE_SYSTEM_WRITE,
    ErrorKind.WRITE: ErrorCategory.FILE_SYSTEM_WRITE,
}


@dataclass(frozen=True)
class ValidationError:
    """
    A single problem detected by an import stage.

    Stages collect these into ordered lists rather than raising, so that every
    problem can be reported to the operator in one run.
    """
    kind: ErrorKind
    message: str
    path: Optional[Path] = None

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category

    def __str__(self) -> str:
        return self.message


ErrorList = Sequence[ValidationError]


class CAImportError(Exception):
    """Base class for Certificate Authority import errors."""


class InvalidPemError(CAImportError):
    """Raised when a PEM block cannot be decoded into the expected object."""


class FileSystemWriteError(CAImportError):
    """Raised when an artifact cannot be materialised on disk."""

    kind: ErrorKind = ErrorKind.WRITE

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path

    def to_validation_error(self) -> ValidationError:
        return ValidationError(self.kind, str(self), self.path)


class DirectoryCreateError(FileSystemWriteError):
    """Raised when the CA directory cannot be created."""

    kind = ErrorKind.DIRECTORY_CREATE


class WriteError(FileSystemWriteError):
    """Raised when an artifact cannot be written."""

    kind = ErrorKind.WRITE


class MaterializationError(CAImportError):
    """
    Raised when materialisation stops part way through.

    Carries the underlying FileSystemWriteError and the artifacts that were
    already written before the failure. Those are not rolled back.
    """

    def __init__(self, cause: FileSystemWriteError, written: Sequence[Path]):
        super().__init__(str(cause))
        self.cause = cause
        self.written = tuple(written)
