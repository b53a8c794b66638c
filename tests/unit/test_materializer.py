"""Unit tests for caimport.services.materializer module."""

import os

import pytest

from caimport.services.errors import (
    DirectoryCreateError,
    ErrorCategory,
    MaterializationError,
    WriteError,
)
from caimport.services.identity import load_identity
from caimport.services.materializer import Materializer
from caimport.services.settings import DestinationSet, resolve_destinations


def _mode(path):
    return os.stat(path).st_mode & 0o777


@pytest.fixture
def identity(import_inputs):
    return load_identity(import_inputs.bundle, import_inputs.key, import_inputs.crl_chain).identity

@pytest.fixture
def destinations(ca_config):
    return resolve_destinations(ca_config).destinations


class TestEnsureDirectory:

    def test_creates_missing_parents(self, tmp_path):
        """Should create the directory and its parents."""
        target = tmp_path / "a" / "b" / "ca"

        Materializer().ensure_directory(target)

        assert target.is_dir()

    def test_existing_directory_is_noop(self, tmp_path):
        """Should leave an existing directory and its contents alone."""
        (tmp_path / "keep.txt").write_text("keep")

        Materializer().ensure_directory(tmp_path)

        assert (tmp_path / "keep.txt").read_text() == "keep"

    def test_path_is_a_file(self, tmp_path):
        """Should raise DirectoryCreateError when a file is in the way."""
        blocker = tmp_path / "ca"
        blocker.write_text("not a directory")

        with pytest.raises(DirectoryCreateError) as exc_info:
            Materializer().ensure_directory(blocker)

        assert exc_info.value.to_validation_error().category is ErrorCategory.FILE_SYSTEM_WRITE


class TestWriteArtifact:

    def test_writes_content_with_mode(self, tmp_path):
        """Should write the full content with exactly the requested mode."""
        target = tmp_path / "ca_crt.pem"

        Materializer().write_artifact(target, "certificate", 0o600)

        assert target.read_text() == "certificate"
        assert _mode(target) == 0o600

    def test_failure_raises_write_error(self, tmp_path):
        """Should raise WriteError and leave nothing at the final path."""
        target = tmp_path / "missing" / "ca_crt.pem"

        with pytest.raises(WriteError):
            Materializer().write_artifact(target, "certificate", 0o600)

        assert not target.exists()

    def test_never_replaces_existing_file(self, tmp_path):
        """Should raise WriteError and keep a file that is already in place."""
        target = tmp_path / "ca_crt.pem"
        target.write_text("someone else's certificate")

        with pytest.raises(WriteError, match="not replaced"):
            Materializer().write_artifact(target, "certificate", 0o600)

        assert target.read_text() == "someone else's certificate"
        assert [p.name for p in tmp_path.iterdir()] == ["ca_crt.pem"]


class TestEnsureAuxiliaryFile:

    def test_creates_absent_file(self, tmp_path):
        """Should create the file with its default content."""
        serial = tmp_path / "serial"

        assert Materializer().ensure_auxiliary_file(serial, "0x0001", 0o600) is True

        assert serial.read_text() == "0x0001"
        assert _mode(serial) == 0o600

    def test_never_overwrites(self, tmp_path):
        """Should leave an existing file's content and mode untouched."""
        serial = tmp_path / "serial"
        serial.write_text("0x00A0")
        serial.chmod(0o640)

        assert Materializer().ensure_auxiliary_file(serial, "0x0001", 0o600) is False

        assert serial.read_text() == "0x00A0"
        assert _mode(serial) == 0o640


class TestMaterialize:

    def test_writes_all_artifacts(self, identity, destinations):
        """Should create the directory and all five files with owner-only permissions."""
        written = Materializer().materialize(identity, destinations)

        assert written == destinations.targets()
        assert destinations.cadir.is_dir()
        for path in destinations.targets():
            assert path.is_file()
            assert _mode(path) == 0o600

    def test_artifact_contents(self, identity, destinations, import_inputs):
        """Should write PEM text verbatim and seed the bookkeeping files."""
        Materializer().materialize(identity, destinations)

        assert destinations.cacert.read_bytes() == import_inputs.bundle.read_bytes()
        assert destinations.cakey.read_bytes() == import_inputs.key.read_bytes()
        assert destinations.cacrl.read_text() == import_inputs.material.crl_chain_pem
        assert destinations.serial.read_text() == "0x0001"
        assert destinations.cert_inventory.read_text() == ""

    def test_existing_bookkeeping_files_kept(self, identity, destinations):
        """Should not reset serial or inventory files owned by the CA runtime."""
        destinations.cadir.mkdir()
        destinations.serial.write_text("0x0042")
        destinations.cert_inventory.write_text("0x0041 2024-01-01T00:00:00UTC /CN=host\n")

        written = Materializer().materialize(identity, destinations)

        assert written == (destinations.cacert, destinations.cakey, destinations.cacrl)
        assert destinations.serial.read_text() == "0x0042"
        assert destinations.cert_inventory.read_text().startswith("0x0041")

    def test_partial_failure_reports_written(self, identity, destinations, tmp_path):
        """Should stop at the failing write and report what was already written."""
        broken = DestinationSet(**{
            **destinations.model_dump(),
            "cakey": tmp_path / "missing" / "ca_key.pem",
        })

        with pytest.raises(MaterializationError) as exc_info:
            Materializer().materialize(identity, broken)

        assert exc_info.value.written == (broken.cacert,)
        assert isinstance(exc_info.value.cause, WriteError)
        assert broken.cacert.exists()
        assert not broken.cacrl.exists()
        assert not broken.serial.exists()

    def test_directory_failure(self, identity, destinations):
        """Should report a DirectoryCreateError before writing any file."""
        destinations.cadir.write_text("in the way")

        with pytest.raises(MaterializationError) as exc_info:
            Materializer().materialize(identity, destinations)

        assert exc_info.value.written == ()
        assert isinstance(exc_info.value.cause, DirectoryCreateError)

    def test_file_appearing_after_check_is_kept(self, identity, destinations):
        """Should stop rather than clobber an artifact created by someone else."""
        destinations.cadir.mkdir()
        destinations.cakey.write_text("not ours")

        with pytest.raises(MaterializationError) as exc_info:
            Materializer().materialize(identity, destinations)

        assert exc_info.value.written == (destinations.cacert,)
        assert isinstance(exc_info.value.cause, WriteError)
        assert destinations.cakey.read_text() == "not ours"
