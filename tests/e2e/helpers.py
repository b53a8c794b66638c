# tests/e2e/helpers.py

import subprocess, sys, pytest

def run_caimport(caimport_bin, *args):
    cmd = [caimport_bin, *args]
    if caimport_bin.endswith(".py"):
        cmd = [sys.executable, *cmd]
    return subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)

def run_import(caimport_bin, inputs, config, *extra):
    return run_caimport(caimport_bin,
                        "ca", "import",
                        "--cert-bundle", str(inputs["bundle"]),
                        "--private-key", str(inputs["key"]),
                        "--crl-chain", str(inputs["crl"]),
                        "--config", str(config),
                        *extra)

def assert_rc(res, expected, step_desc):
    if res.returncode != expected:
        pytest.fail(f"{step_desc} returned {res.returncode}, expected {expected}\n"
                    f"--- output ---\n{res.stdout}\n--------------")
