"""
Post-deployment verification.

The harness looks up the current instance of a component in the deployment
directory, reads one piece of its state and compares it with a value
supplied by the caller.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from web3 import Web3

from .errors import AccessorReadFailed, AssertionFailed, NotDeployed
from .platform import Handle, Platform
from .registry import DeploymentDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpectedState:
    """What a deployed component is expected to report"""
    component: str
    accessor: str
    expected: Any
    message: Optional[str] = None


def _normalize(value):
    # Addresses may come back checksummed while the expectation is lowercase
    if isinstance(value, str) and Web3.is_address(value):
        return Web3.to_checksum_address(value)
    return value


class VerificationHarness:
    def __init__(self, platform: Platform, directory: DeploymentDirectory):
        self.platform = platform
        self.directory = directory

    def get_deployed_instance(self, name: str) -> Handle:
        address = self.directory.lookup(name)
        if address is None:
            raise NotDeployed(name)
        return self.platform.instance(name, address)

    def read_state(self, handle: Handle, accessor: str) -> Any:
        try:
            value = self.platform.read_accessor(handle, accessor)
        except Exception as e:
            logger.error(f"Failed to read {handle.name}.{accessor}(): {e}")
            raise AccessorReadFailed(handle.name, accessor, e) from e
        logger.info(f"{handle.name}.{accessor}() at {handle.address} returned {value!r}")
        return value

    def assert_equals(self, actual, expected, message: str):
        if _normalize(actual) != _normalize(expected):
            raise AssertionFailed(message, actual, expected)

    def check(self, state: ExpectedState) -> Any:
        """Run one lookup, read and comparison; returns the value read"""
        handle = self.get_deployed_instance(state.component)
        actual = self.read_state(handle, state.accessor)
        message = state.message or f"Incorrect {state.component}.{state.accessor}"
        self.assert_equals(actual, state.expected, message)
        logger.info(f"{state.component}.{state.accessor} matches the expected value")
        return actual
