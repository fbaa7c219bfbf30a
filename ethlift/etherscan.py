"""Etherscan client for fetching verified contract source code."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .config import ETHERSCAN_API_URL, HTTP_TIMEOUT
from .exceptions import InvalidChainId, RemoteFetchFailed
from .models import ContractIdentity

logger = logging.getLogger(__name__)

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

# Networks with an Etherscan-family explorer, by EIP-155 chain id.
KNOWN_CHAINS: Dict[int, str] = {
    1: "mainnet",
    5: "goerli",
    10: "optimism",
    25: "cronos",
    56: "bsc",
    97: "bsc-testnet",
    100: "gnosis",
    137: "polygon",
    250: "fantom",
    324: "zksync",
    1101: "polygon-zkevm",
    1284: "moonbeam",
    1285: "moonriver",
    4002: "fantom-testnet",
    8453: "base",
    17000: "holesky",
    42161: "arbitrum",
    42170: "arbitrum-nova",
    42220: "celo",
    43113: "avalanche-fuji",
    43114: "avalanche",
    59144: "linea",
    80001: "polygon-mumbai",
    81457: "blast",
    84532: "base-sepolia",
    421614: "arbitrum-sepolia",
    534352: "scroll",
    11155111: "sepolia",
    11155420: "optimism-sepolia",
}


@dataclass(frozen=True)
class Chain:
    id: int
    name: str

    @classmethod
    def from_id(cls, chain_id: int) -> "Chain":
        """Look up a known chain.

        Raises:
            InvalidChainId: For non-positive or unknown ids.
        """
        if chain_id <= 0 or chain_id not in KNOWN_CHAINS:
            raise InvalidChainId(chain_id)
        return cls(chain_id, KNOWN_CHAINS[chain_id])


@dataclass
class SourceFile:
    path: str
    content: str


@dataclass
class ContractMetadata:
    """One ``getsourcecode`` result item."""
    contract_name: str
    compiler_version: str
    files: List[SourceFile] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)

    def source_code(self) -> str:
        """All source contents joined by newlines, in document order."""
        return "\n".join(f.content for f in self.files)


def parse_source_code(source_code: str, contract_name: str = "") -> List[SourceFile]:
    """Decode the ``SourceCode`` field of an explorer response.

    Multi-file contracts come either as standard-JSON input wrapped in an
    extra pair of braces (``{{...}}``) or as a bare ``{path: {content}}``
    mapping. Anything else is a single flattened file.
    """
    text = source_code.strip()
    if text.startswith("{{") and text.endswith("}}"):
        document = json.loads(text[1:-1])
        sources = document.get("sources", {})
    elif text.startswith("{"):
        try:
            document = json.loads(text)
        except json.JSONDecodeError:
            return [SourceFile(contract_name or "source", source_code)]
        sources = document.get("sources", document) if isinstance(document, dict) else {}
    else:
        return [SourceFile(contract_name or "source", source_code)]

    files = []
    for path, entry in sources.items():
        if isinstance(entry, dict) and isinstance(entry.get("content"), str):
            files.append(SourceFile(path, entry["content"]))
    if not files:
        raise ValueError("no source contents in payload")
    return files


class EtherscanClient:
    """Minimal client for the Etherscan contract API."""

    def __init__(
        self,
        chain: Chain,
        api_key: str,
        base_url: str = ETHERSCAN_API_URL,
        timeout: Optional[float] = HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.chain = chain
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, params: Dict[str, str]) -> Any:
        query = {"chainid": str(self.chain.id), **params, "apikey": self.api_key}
        try:
            response = self.session.get(self.base_url, params=query, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise RemoteFetchFailed(f"Etherscan request failed: {exc}") from exc
        except ValueError as exc:
            raise RemoteFetchFailed(f"Etherscan returned invalid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise RemoteFetchFailed("Etherscan API error: unexpected payload")
        if str(data.get("status")) != "1":
            message = data.get("result") or data.get("message") or "unknown error"
            raise RemoteFetchFailed(f"Etherscan API error: {message}")
        return data.get("result")

    def contract_source_code(self, address: str) -> ContractMetadata:
        """Fetch verified source metadata for ``address``.

        Raises:
            RemoteFetchFailed: Invalid address, transport or API error, or
                an unverified contract.
        """
        if not ADDRESS_RE.match(address):
            raise RemoteFetchFailed(f"invalid contract address: {address}")

        logger.info("Fetching verified source for %s on %s", address, self.chain.name)
        result = self._get({"module": "contract", "action": "getsourcecode", "address": address})
        if not isinstance(result, list) or not result or not isinstance(result[0], dict):
            raise RemoteFetchFailed(f"Unexpected Etherscan response for {address}")

        item = result[0]
        source_code = item.get("SourceCode") or ""
        if not source_code:
            raise RemoteFetchFailed(f"Contract source code not verified: {address}")

        name = item.get("ContractName", "")
        try:
            files = parse_source_code(source_code, name)
        except ValueError as exc:
            raise RemoteFetchFailed(f"Could not decode source code for {address}: {exc}") from exc

        logger.debug("Received %d source file(s) for %s", len(files), name or address)
        return ContractMetadata(
            contract_name=name,
            compiler_version=item.get("CompilerVersion", ""),
            files=files,
            raw=item,
        )


def get_contract_source_code(
    identity: ContractIdentity,
    api_key: str,
    client: Optional[EtherscanClient] = None,
) -> str:
    """Return the verified source text for ``identity``."""
    chain = Chain.from_id(identity.chain_id)
    client = client or EtherscanClient(chain, api_key)
    return client.contract_source_code(identity.address).source_code()
