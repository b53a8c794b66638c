# caimport/services/identity.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from caimport.services.errors import ErrorKind, ErrorList, InvalidPemError, ValidationError
from caimport.utils.crypto import (
    PEM_CERTIFICATE,
    PEM_CRL,
    PemBlock,
    blocks_labelled,
    crl_issued_by,
    key_matches_certificate,
    load_certificate_block,
    load_crl_block,
    load_private_key_block,
    split_pem,
)
from caimport.utils.files import StrPath, read_bytes

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaIdentity:
    """
    A validated CA identity, ready to be written out.

    Only ever constructed once every validation rule has passed.
    """
    certificates: Tuple[x509.Certificate, ...]
    private_key: PrivateKeyTypes
    crls: Tuple[x509.CertificateRevocationList, ...]
    certificate_pem: str
    private_key_pem: str
    crl_pem: str

    @property
    def ca_certificate(self) -> x509.Certificate:
        return self.certificates[0]


@dataclass(frozen=True)
class Valid:
    identity: CaIdentity

    ok = True


@dataclass(frozen=True)
class Invalid:
    errors: ErrorList

    ok = False


LoadResult = Union[Valid, Invalid]


def _read_text(path: Path, errors: List[ValidationError]) -> Optional[str]:
    try:
        return read_bytes(path).decode('utf-8')
    except OSError as err:
        errors.append(ValidationError(ErrorKind.FILE_NOT_READABLE, str(err), path))
    except UnicodeDecodeError:
        errors.append(ValidationError(
            ErrorKind.FILE_NOT_READABLE,
            f"Could not decode '{path}' as PEM text",
            path,
        ))
    return None

def _load_certificates(path: Path, pem: str,
                       errors: List[ValidationError]) -> List[Optional[x509.Certificate]]:
    """One entry per CERTIFICATE block; None where the block failed to parse."""
    blocks = blocks_labelled(split_pem(pem), PEM_CERTIFICATE)

    if not blocks:
        errors.append(ValidationError(
            ErrorKind.EMPTY_CERT_BUNDLE,
            f"Could not detect any certs within '{path}'",
            path,
        ))
        return []

    certs: List[Optional[x509.Certificate]] = []
    for index, block in enumerate(blocks, start=1):
        try:
            certs.append(load_certificate_block(block))
        except InvalidPemError as err:
            certs.append(None)
            log.debug("Certificate %d in %s: %s", index, path, err.__cause__)
            errors.append(ValidationError(
                ErrorKind.INVALID_CERTIFICATE,
                f"Could not parse certificate {index} within '{path}'",
                path,
            ))

    return certs

def _load_private_key(path: Path, pem: str,
                      errors: List[ValidationError]) -> Optional[PrivateKeyTypes]:
    blocks = [block for block in split_pem(pem) if block.is_private_key]

    if not blocks:
        errors.append(ValidationError(
            ErrorKind.INVALID_KEY_MATERIAL,
            f"Could not detect a private key within '{path}'",
            path,
        ))
        return None

    if len(blocks) > 1:
        errors.append(ValidationError(
            ErrorKind.INVALID_KEY_MATERIAL,
            f"Found {len(blocks)} private keys within '{path}', expected exactly one",
            path,
        ))
        return None

    try:
        return load_private_key_block(blocks[0])
    except InvalidPemError as err:
        errors.append(ValidationError(
            ErrorKind.INVALID_KEY_MATERIAL,
            f"Could not parse private key within '{path}': {err.__cause__}",
            path,
        ))
        return None

def _load_crls(path: Path, pem: str, errors: List[ValidationError]
               ) -> List[Tuple[PemBlock, x509.CertificateRevocationList]]:
    loaded = []

    for index, block in enumerate(blocks_labelled(split_pem(pem), PEM_CRL), start=1):
        try:
            loaded.append((block, load_crl_block(block)))
        except InvalidPemError as err:
            log.debug("CRL %d in %s: %s", index, path, err.__cause__)
            errors.append(ValidationError(
                ErrorKind.INVALID_CRL,
                f"Could not parse CRL {index} within '{path}'",
                path,
            ))

    return loaded


def load_identity(bundle_path: StrPath,
                  key_path: StrPath,
                  crl_chain_path: StrPath) -> LoadResult:
    """
    Load and cross-validate a CA identity from three PEM files.

    Every rule is evaluated and every failure reported; nothing short-circuits
    across unrelated checks. No trust-root verification is done, only internal
    consistency.

    Args:
        bundle_path: One or more PEM certificates, CA certificate first.
        key_path: Exactly one PEM private key for the CA certificate.
        crl_chain_path: Zero or more PEM CRLs issued by certificates in the bundle.

    Returns:
        Valid(identity) when there were no errors, otherwise Invalid(errors).
    """
    bundle_path, key_path, crl_chain_path = Path(bundle_path), Path(key_path), Path(crl_chain_path)
    errors: List[ValidationError] = []

    bundle_pem = _read_text(bundle_path, errors)
    loaded_certs = _load_certificates(bundle_path, bundle_pem, errors) if bundle_pem is not None else []
    certs = [cert for cert in loaded_certs if cert is not None]

    key_pem = _read_text(key_path, errors)
    private_key = _load_private_key(key_path, key_pem, errors) if key_pem is not None else None

    crl_chain_pem = _read_text(crl_chain_path, errors)
    crls = _load_crls(crl_chain_path, crl_chain_pem, errors) if crl_chain_pem is not None else []

    ca_cert = loaded_certs[0] if loaded_certs else None

    if private_key is not None and ca_cert is not None:
        if not key_matches_certificate(private_key, ca_cert):
            errors.append(ValidationError(
                ErrorKind.KEY_CERT_MISMATCH,
                f"Private key '{key_path}' does not match the first certificate in '{bundle_path}'",
                key_path,
            ))

    # issuers can only be judged against a fully parsed bundle
    if certs and all(cert is not None for cert in loaded_certs):
        for index, (_, crl) in enumerate(crls, start=1):
            if not any(crl_issued_by(crl, cert) for cert in certs):
                errors.append(ValidationError(
                    ErrorKind.CRL_ISSUER_MISMATCH,
                    f"CRL {index} within '{crl_chain_path}' was not issued by a certificate "
                    f"in '{bundle_path}' ({crl.issuer.rfc4514_string()})",
                    crl_chain_path,
                ))

    if errors:
        log.debug("Identity validation produced %d error(s)", len(errors))
        return Invalid(errors=tuple(errors))

    identity = CaIdentity(
        certificates=tuple(certs),
        private_key=private_key,
        crls=tuple(crl for _, crl in crls),
        certificate_pem=bundle_pem,
        private_key_pem=key_pem,
        crl_pem=''.join(block.text() for block, _ in crls),
    )
    log.debug("Loaded CA identity: %d certificate(s), %d CRL(s)",
              len(identity.certificates), len(identity.crls))

    return Valid(identity=identity)


class IdentityLoader:
    """Loader capability injected into the importer; wraps load_identity()."""

    def load(self, bundle_path: StrPath, key_path: StrPath,
             crl_chain_path: StrPath) -> LoadResult:
        return load_identity(bundle_path, key_path, crl_chain_path)
