# tests/conftest.py

from dataclasses import dataclass
from pathlib import Path
from typing import List

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from pki_helpers import build_ca_cert, build_crl, cert_pem, crl_pem, key_pem


@dataclass
class CAMaterial:
    root_key: rsa.RSAPrivateKey
    root_cert: x509.Certificate
    ca_key: ec.EllipticCurvePrivateKey
    ca_cert: x509.Certificate
    ca_crl: x509.CertificateRevocationList
    root_crl: x509.CertificateRevocationList
    foreign_key: ec.EllipticCurvePrivateKey

    @property
    def bundle_pem(self) -> str:
        return cert_pem(self.ca_cert) + cert_pem(self.root_cert)

    @property
    def crl_chain_pem(self) -> str:
        return crl_pem(self.ca_crl) + crl_pem(self.root_crl)


@dataclass
class ImportInputs:
    bundle: Path
    key: Path
    crl_chain: Path
    material: CAMaterial

    @property
    def paths(self) -> List[Path]:
        return [self.bundle, self.key, self.crl_chain]


@pytest.fixture(scope="session")
def ca_material() -> CAMaterial:
    """A two level CA: RSA root, EC intermediate being imported, plus CRLs for both."""
    root_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    root_cert = build_ca_cert(root_key, "Test Root CA")

    ca_key = ec.generate_private_key(ec.SECP256R1())
    ca_cert = build_ca_cert(ca_key, "Test Intermediate CA", issuer_key=root_key, issuer_cert=root_cert)

    return CAMaterial(
        root_key=root_key,
        root_cert=root_cert,
        ca_key=ca_key,
        ca_cert=ca_cert,
        ca_crl=build_crl(ca_cert, ca_key, revoked=(1001, 1002)),
        root_crl=build_crl(root_cert, root_key),
        foreign_key=ec.generate_private_key(ec.SECP256R1()),
    )

@pytest.fixture
def import_inputs(tmp_path, ca_material) -> ImportInputs:
    """Well formed, matching bundle/key/CRL chain files."""
    src = tmp_path / "inputs"
    src.mkdir()

    bundle = src / "bundle.pem"
    bundle.write_text(ca_material.bundle_pem)
    key = src / "key.pem"
    key.write_text(key_pem(ca_material.ca_key))
    crl_chain = src / "crl_chain.pem"
    crl_chain.write_text(ca_material.crl_chain_pem)

    return ImportInputs(bundle=bundle, key=key, crl_chain=crl_chain, material=ca_material)

@pytest.fixture
def cadir(tmp_path) -> Path:
    return tmp_path / "ca"

@pytest.fixture
def ca_config(tmp_path, cadir) -> Path:
    """Settings file placing every destination under a per-test CA directory."""
    conf = tmp_path / "caimport.conf"
    conf.write_text(
        "[main]\n"
        f"confdir = {tmp_path / 'etc'}\n"
        "\n"
        "[ca]\n"
        f"cadir = {cadir}\n"
    )
    return conf


class RecordingReporter:
    """Reporter that keeps messages instead of printing them."""

    def __init__(self):
        self.informed: List[str] = []
        self.warnings: List[str] = []
        self.errors: List[str] = []

    def inform(self, text: str) -> None:
        self.informed.append(text)

    def warn(self, text: str) -> None:
        self.warnings.append(text)

    def error(self, text: str) -> None:
        self.errors.append(text)


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()
