"""Forge build and artifact loading."""

import json
import os
import shutil
from pathlib import Path

import pytest

from vault_deploy.forge import FatalBuildError, ForgeFailed, compile_contracts_with_forge, load_forge_artifact

VAULT_ABI = [{"type": "constructor", "inputs": [{"name": "_strategy", "type": "address"}], "stateMutability": "nonpayable"}]


def _write_artifact(project: Path, source: str, name: str, bytecode):
    folder = project / "out" / source
    folder.mkdir(parents=True, exist_ok=True)
    (folder / f"{name}.json").write_text(json.dumps({"abi": VAULT_ABI, "bytecode": bytecode}))


def test_load_forge_artifact(tmp_path):
    _write_artifact(tmp_path, "BeefyVaultV6.sol", "BeefyVaultV6", {"object": "0x6080604052"})
    artifact = load_forge_artifact(tmp_path, "BeefyVaultV6")
    assert artifact["abi"] == VAULT_ABI
    assert artifact["bytecode"] == "0x6080604052"


def test_load_artifact_source_name_differs(tmp_path):
    """Strategy may live in a file with a different name."""
    _write_artifact(tmp_path, "Scream.sol", "StrategyScream", {"object": "6080"})
    artifact = load_forge_artifact(tmp_path, "StrategyScream")
    assert artifact["bytecode"] == "0x6080"


def test_load_flat_bytecode_artifact(tmp_path):
    _write_artifact(tmp_path, "BeefyVaultV6.sol", "BeefyVaultV6", "0x6080")
    assert load_forge_artifact(tmp_path, "BeefyVaultV6")["bytecode"] == "0x6080"


def test_missing_artifact(tmp_path):
    with pytest.raises(FatalBuildError, match="No compiled artifact"):
        load_forge_artifact(tmp_path, "StrategyScream")


def test_ambiguous_artifact(tmp_path):
    _write_artifact(tmp_path, "A.sol", "StrategyScream", {"object": "0x60"})
    _write_artifact(tmp_path, "B.sol", "StrategyScream", {"object": "0x60"})
    with pytest.raises(FatalBuildError, match="Ambiguous"):
        load_forge_artifact(tmp_path, "StrategyScream")


def test_build_error_is_forge_failure():
    assert issubclass(FatalBuildError, ForgeFailed)


@pytest.mark.skipif(shutil.which("forge") is None, reason="forge not installed")
def test_compile_broken_contract(tmp_path):
    """Solidity syntax error fails the build."""
    (tmp_path / "foundry.toml").write_text("[profile.default]\nsrc = 'src'\nout = 'out'\n")
    os.makedirs(tmp_path / "src")
    (tmp_path / "src" / "Broken.sol").write_text("pragma solidity ^0.8.0;\ncontract Broken { function x( }\n")

    with pytest.raises(FatalBuildError):
        compile_contracts_with_forge(tmp_path)
