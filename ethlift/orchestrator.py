"""Coordinates the flatten, fetch, and diff steps of one comparison."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .diff_engine import DiffEngine
from .etherscan import get_contract_source_code
from .flattener import flatten_file
from .models import ContractIdentity, DiffResult, ProjectConfig

logger = logging.getLogger(__name__)

SourceFetcher = Callable[[ContractIdentity, str], str]


class DiffOrchestrator:
    """Compares a local entry file with the verified on-chain source."""

    def __init__(
        self,
        project: ProjectConfig,
        api_key: str,
        fetcher: Optional[SourceFetcher] = None,
        diff_engine: Optional[DiffEngine] = None,
    ):
        self.project = project
        self.api_key = api_key
        self.fetcher = fetcher or get_contract_source_code
        self.diff_engine = diff_engine or DiffEngine()

    def flatten(self, file_path: str) -> str:
        return flatten_file(file_path, self.project)

    def fetch(self, contract: ContractIdentity) -> str:
        """Blocking explorer call; the only network I/O of a run."""
        return self.fetcher(contract, self.api_key)

    def compare(self, file_path: str, contract: ContractIdentity) -> DiffResult:
        """Flatten locally, then fetch remotely, then diff. Prints nothing."""
        local = self.flatten(file_path)
        remote = self.fetch(contract)
        result = self.diff_engine.create_diff(local, remote)
        logger.info(
            "Diff for %s: %d hunk(s), +%d -%d",
            contract.address,
            len(result.hunks),
            result.additions,
            result.removals,
        )
        return result

    def run(self, file_path: str, contract: ContractIdentity, color: bool = True) -> DiffResult:
        """Compare and print the diff to stdout."""
        result = self.compare(file_path, contract)
        self.diff_engine.echo(result, color=color)
        return result
