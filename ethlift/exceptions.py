"""Error kinds raised by EthLift.

Every error is fatal for the run; the CLI turns any :class:`EthLiftError`
into a one-line message on stderr and a non-zero exit status.
"""

from __future__ import annotations


class EthLiftError(Exception):
    """Base class for all EthLift errors."""


class MalformedRemapping(EthLiftError):
    """A remapping string does not have the expected shape."""

    def __init__(self, remapping: str, reason: str):
        self.remapping = remapping
        self.reason = reason
        super().__init__(f"malformed remapping '{remapping}': {reason}")


class HomeDirectoryNotFound(EthLiftError):
    """The user's home directory could not be resolved."""

    def __init__(self, message: str = "home dir not found!"):
        super().__init__(message)


class ConfigError(EthLiftError):
    """A config document could not be read or parsed."""


class ConfigKeyMissing(ConfigError):
    """The remappings key is absent from a legacy config document."""

    def __init__(self, path: str, key: str):
        self.path = path
        self.key = key
        super().__init__(f"key {key} not found in {path}")


class InvalidChainId(EthLiftError):
    """The chain id does not map to a known network."""

    def __init__(self, chain_id: object):
        self.chain_id = chain_id
        super().__init__(f"invalid chain id -- {chain_id}")


class FlattenFailed(EthLiftError):
    """Local import resolution failed; the cause is chained."""

    def __init__(self, target: str, cause: BaseException):
        self.target = target
        self.cause = cause
        super().__init__(f"failed to flatten {target}: {cause}")


class RemoteFetchFailed(EthLiftError):
    """The explorer lookup failed."""
