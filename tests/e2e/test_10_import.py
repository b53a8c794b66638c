# tests/e2e/test_10_import.py

import os
import pytest
from helpers import assert_rc, run_caimport, run_import

pytestmark = pytest.mark.e2e

@pytest.mark.order(10)
def test_import_bad_bundle_touches_nothing(caimport_bin, workspace, e2e_inputs, tmp_path):
    empty = tmp_path / "empty.pem"
    empty.write_text("")
    inputs = {**e2e_inputs, "bundle": empty}

    res = run_import(caimport_bin, inputs, workspace["config"])

    assert_rc(res, 1, "import with empty bundle")
    assert "Could not detect any certs" in res.stdout
    assert not workspace["cadir"].exists()

@pytest.mark.order(20)
def test_import_into_empty_cadir(caimport_bin, workspace, e2e_inputs):
    res = run_import(caimport_bin, e2e_inputs, workspace["config"])

    assert_rc(res, 0, "ca import")
    assert f"Find your files in {workspace['cadir']}" in res.stdout

@pytest.mark.order(30)
def test_imported_files_and_perms(workspace, e2e_inputs):
    cadir = workspace["cadir"]
    expected = ["ca_crl.pem", "ca_crt.pem", "ca_key.pem", "inventory.txt", "serial"]

    assert sorted(p.name for p in cadir.iterdir()) == expected
    for name in expected:
        mode = os.stat(cadir / name).st_mode & 0o777
        assert mode == 0o600, f"Expected {name} perms 0600, got {oct(mode)}"

    assert (cadir / "ca_crt.pem").read_bytes() == e2e_inputs["bundle"].read_bytes()
    assert (cadir / "ca_key.pem").read_bytes() == e2e_inputs["key"].read_bytes()
    assert (cadir / "serial").read_text() == "0x0001"
    assert (cadir / "inventory.txt").read_text() == ""

@pytest.mark.order(40)
def test_reimport_refused(caimport_bin, workspace, e2e_inputs):
    cacert = workspace["cadir"] / "ca_crt.pem"
    before = (cacert.read_bytes(), cacert.stat().st_mtime_ns)

    res = run_import(caimport_bin, e2e_inputs, workspace["config"])

    assert_rc(res, 1, "second ca import")
    assert res.stdout.count("Existing file at") == 5
    assert "certificates that were issued by this CA will become invalid" in res.stdout
    assert (cacert.read_bytes(), cacert.stat().st_mtime_ns) == before

@pytest.mark.order(50)
def test_missing_arguments(caimport_bin):
    res = run_caimport(caimport_bin, "ca", "import")

    assert_rc(res, 1, "ca import without arguments")
    assert "--cert-bundle, --private-key, --crl-chain are required" in res.stdout
