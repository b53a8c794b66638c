# caimport/utils/crypto.py

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import (
    CertificatePublicKeyTypes,
    PrivateKeyTypes,
)

from caimport.services.errors import InvalidPemError

PEM_CERTIFICATE = 'CERTIFICATE'
PEM_CRL = 'X509 CRL'

_PEM_BLOCK = re.compile(
    rb'-----BEGIN (?P<label>[A-Z0-9 ]+)-----'
    rb'.*?'
    rb'-----END (?P=label)-----',
    re.DOTALL,
)

_PARSE_ERRORS = (ValueError, TypeError, UnsupportedAlgorithm)


@dataclass(frozen=True)
class PemBlock:
    """A single BEGIN/END delimited block, as it appeared in the source text."""
    label: str
    data: bytes

    @property
    def is_private_key(self) -> bool:
        return self.label.endswith('PRIVATE KEY')

    def text(self) -> str:
        return self.data.decode('ascii') + '\n'


def split_pem(pem: Union[str, bytes]) -> List[PemBlock]:
    """
    Split PEM text into its blocks, in file order.

    Anything outside BEGIN/END markers (comments, "Bag Attributes", blank lines)
    is ignored.
    """
    data = pem.encode('utf-8') if isinstance(pem, str) else pem

    return [
        PemBlock(label=match.group('label').decode('ascii'), data=match.group(0))
        for match in _PEM_BLOCK.finditer(data)
    ]

def blocks_labelled(blocks: Iterable[PemBlock], label: str) -> List[PemBlock]:
    return [block for block in blocks if block.label == label]

def load_certificate_block(block: PemBlock) -> x509.Certificate:
    """
    Load a PEM certificate block into a cryptography.x509.Certificate.

    Raises:
        InvalidPemError: If the block cannot be parsed.
    """
    try:
        return x509.load_pem_x509_certificate(block.data)
    except _PARSE_ERRORS as exc:
        raise InvalidPemError("Failed to parse PEM certificate.") from exc

def load_private_key_block(block: PemBlock) -> PrivateKeyTypes:
    """
    Load an unencrypted PEM private key block.

    Raises:
        InvalidPemError: If the block cannot be parsed, or is encrypted.
    """
    try:
        return serialization.load_pem_private_key(block.data, password=None)
    except _PARSE_ERRORS as exc:
        raise InvalidPemError(f"Failed to parse PEM private key: {exc}") from exc

def load_crl_block(block: PemBlock) -> x509.CertificateRevocationList:
    """
    Load a PEM CRL block.

    Raises:
        InvalidPemError: If the block cannot be parsed.
    """
    try:
        return x509.load_pem_x509_crl(block.data)
    except _PARSE_ERRORS as exc:
        raise InvalidPemError("Failed to parse PEM CRL.") from exc

def _spki(public_key: CertificatePublicKeyTypes) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )

def key_matches_certificate(private_key: PrivateKeyTypes,
                            certificate: x509.Certificate) -> bool:
    """
    Returns true if the private key is the other half of the certificate's public key

    Keys are compared by their DER SubjectPublicKeyInfo encoding, which works for
    every key type cryptography supports.
    """
    try:
        return _spki(private_key.public_key()) == _spki(certificate.public_key())
    except _PARSE_ERRORS:
        return False

def crl_issued_by(crl: x509.CertificateRevocationList,
                  certificate: x509.Certificate) -> bool:
    """
    Returns true if the certificate's subject issued the CRL and its key signed it
    """
    if crl.issuer != certificate.subject:
        return False

    try:
        return crl.is_signature_valid(certificate.public_key())
    except (InvalidSignature, *_PARSE_ERRORS):
        return False
