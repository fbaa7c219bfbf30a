"""Pytest configuration and fixtures for EthLift tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
import requests


@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    """Fail loudly if a test reaches the real Etherscan API.

    Tests that exercise the client pass a fake session instead.
    """

    def _no_network(self, *args, **kwargs):
        raise AssertionError("network access attempted during tests")

    monkeypatch.setattr(requests.Session, "request", _no_network)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path(temp_dir: Path) -> Path:
    """A writable copy of the sample Foundry project."""
    source = Path(__file__).parent / "fixtures" / "sample_project"
    target = temp_dir / "sample_project"
    shutil.copytree(source, target)
    return target


@pytest.fixture
def expected_vault() -> str:
    """Flattened form of the sample project's Vault.sol."""
    return (Path(__file__).parent / "fixtures" / "Vault.flattened.sol").read_text(encoding="utf-8")


@pytest.fixture
def fake_home(temp_dir: Path, monkeypatch) -> Path:
    """Point the home directory at a temporary folder."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


@pytest.fixture
def brownie_project(temp_dir: Path, fake_home: Path) -> Path:
    """A Brownie project whose dependency lives in the package cache."""
    root = temp_dir / "brownie_project"
    (root / "contracts").mkdir(parents=True)
    (root / "brownie-config.yml").write_text(
        "compiler:\n"
        "  solc:\n"
        "    remappings:\n"
        "      - \"@yearnvaults=yearn/yearn-vaults@0.4.3\"\n",
        encoding="utf-8",
    )
    (root / "contracts" / "Strategy.sol").write_text(
        "// SPDX-License-Identifier: AGPL-3.0\n"
        "pragma solidity 0.6.12;\n"
        "\n"
        'import {BaseStrategy} from "@yearnvaults/contracts/BaseStrategy.sol";\n'
        "\n"
        "contract Strategy is BaseStrategy {}\n",
        encoding="utf-8",
    )

    package = fake_home / ".brownie" / "packages" / "yearn" / "yearn-vaults@0.4.3" / "contracts"
    package.mkdir(parents=True)
    (package / "BaseStrategy.sol").write_text(
        "// SPDX-License-Identifier: AGPL-3.0\n"
        "pragma solidity >=0.6.0 <0.7.0;\n"
        "\n"
        "abstract contract BaseStrategy {}\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def verified_response() -> dict:
    """Canned ``getsourcecode`` payload for a single-file contract."""
    return {
        "status": "1",
        "message": "OK",
        "result": [
            {
                "SourceCode": "pragma solidity ^0.8.0;\n\ncontract Vault {}\n",
                "ContractName": "Vault",
                "CompilerVersion": "v0.8.17+commit.8df45f5f",
            }
        ],
    }


class FakeResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Records requests and replays a fixed response."""

    def __init__(self, response: FakeResponse):
        self.response = response
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        return self.response


@pytest.fixture
def fake_session_factory():
    def _factory(payload, status_code: int = 200) -> FakeSession:
        return FakeSession(FakeResponse(payload, status_code))

    return _factory
