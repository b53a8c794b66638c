# tests/e2e/conftest.py

import os
import stat
import sys
from pathlib import Path

import pytest

pytestmark = pytest.mark.e2e

@pytest.fixture(scope="session")
def caimport_bin(pytestconfig, tmp_path_factory):
    """
    Run repo code via `python -m caimport` (no PATH reliance).
    Allow override via CAIMPORT_BIN.
    """
    override = os.environ.get("CAIMPORT_BIN")
    if override:
        p = Path(override)
        if not p.exists():
            pytest.skip(f"CAIMPORT_BIN={override} does not exist")
        return str(p.resolve())

    root = Path(pytestconfig.rootpath)
    src_dir = root / "src"
    pkg_main = src_dir / "caimport" / "__main__.py"
    if not pkg_main.exists():
        pytest.skip(f"Could not find {pkg_main}. Expected package at src/caimport.")

    # shim that sets PYTHONPATH and runs -m caimport
    shim = tmp_path_factory.mktemp("caimport_shim") / "caimport"
    shim.write_text(
        f"#!/usr/bin/env bash\n"
        f"set -euo pipefail\n"
        f'export PYTHONPATH="{src_dir}:${{PYTHONPATH:-}}"\n'
        f'"{sys.executable}" -m caimport "$@"\n'
    )
    shim.chmod(shim.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(shim.resolve())

@pytest.fixture(scope="session")
def workspace(tmp_path_factory):
    """One CA directory shared by the ordered tests in this session."""
    root = tmp_path_factory.mktemp("e2e")
    conf = root / "caimport.conf"
    conf.write_text(f"[main]\nconfdir = {root / 'etc'}\n\n[ca]\ncadir = {root / 'ca'}\n")
    return {"root": root, "config": conf, "cadir": root / "ca"}

@pytest.fixture(scope="session")
def e2e_inputs(workspace, ca_material):
    from pki_helpers import key_pem

    src = workspace["root"] / "inputs"
    src.mkdir()
    files = {
        "bundle": src / "bundle.pem",
        "key": src / "key.pem",
        "crl": src / "crl.pem",
    }
    files["bundle"].write_text(ca_material.bundle_pem)
    files["key"].write_text(key_pem(ca_material.ca_key))
    files["crl"].write_text(ca_material.crl_chain_pem)
    return files
