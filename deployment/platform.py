"""
Execution platforms the orchestrator and the harness talk to.

``Web3Platform`` deploys compiled artifacts to an Ethereum node.
``InMemoryPlatform`` stands in for a node in tests and dry runs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from contracts import Artifact, load_artifact

from .errors import NotDeployed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Handle:
    """A specific deployed instance of a component"""
    name: str
    address: str


class Platform(Protocol):
    """Interface Protocol for the external execution platform."""

    def deploy_instance(self, name: str, args: Sequence[Any]) -> str: ...

    def instance(self, name: str, address: str) -> Handle: ...

    def read_accessor(self, handle: Handle, accessor: str) -> Any: ...


def connect(settings) -> Web3:
    """Initialize Web3 connection"""
    w3 = Web3(Web3.HTTPProvider(settings.rpc_url))
    w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    if not w3.is_connected():
        raise ConnectionError(f"Could not connect to RPC URL: {settings.rpc_url}")
    logger.info(f"Connected to blockchain at {settings.rpc_url}")
    return w3


class Web3Platform:
    def __init__(self, w3: Web3, artifacts_dir: str, account: Optional[str] = None,
                 private_key: Optional[str] = None, gas: Optional[int] = None,
                 receipt_timeout: int = 300):
        self.w3 = w3
        self.artifacts_dir = artifacts_dir
        self.private_key = private_key
        self.gas = gas
        self.receipt_timeout = receipt_timeout
        self._artifacts: Dict[str, Artifact] = {}

        if private_key:
            self.account = w3.eth.account.from_key(private_key).address
        elif account:
            self.account = w3.to_checksum_address(account)
        else:
            # Local development nodes expose unlocked accounts
            self.account = w3.eth.accounts[0]
        logger.info(f"Using deployer account: {self.account}")

    def _artifact(self, name: str) -> Artifact:
        if name not in self._artifacts:
            self._artifacts[name] = load_artifact(name, self.artifacts_dir)
        return self._artifacts[name]

    def deploy_instance(self, name: str, args: Sequence[Any]) -> str:
        artifact = self._artifact(name)
        factory = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        constructor = factory.constructor(*args)

        if self.private_key:
            params = {
                'from': self.account,
                'nonce': self.w3.eth.get_transaction_count(self.account),
                'gasPrice': self.w3.eth.gas_price,
            }
            if self.gas:
                params['gas'] = self.gas
            tx = constructor.build_transaction(params)
            signed_tx = self.w3.eth.account.sign_transaction(tx, self.private_key)
            tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        else:
            params = {'from': self.account}
            if self.gas:
                params['gas'] = self.gas
            tx_hash = constructor.transact(params)

        logger.info(f"{name} deployment transaction sent: {tx_hash.hex()}")
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        if receipt['status'] != 1:
            raise RuntimeError(f"Deployment transaction {tx_hash.hex()} reverted")

        logger.info(f"{name} deployment confirmed in block {receipt['blockNumber']}")
        return receipt['contractAddress']

    def instance(self, name: str, address: str) -> Handle:
        checksum_address = self.w3.to_checksum_address(address)
        # A recorded address with no code belongs to another chain or a reset node
        if not self.w3.eth.get_code(checksum_address):
            raise NotDeployed(name)
        return Handle(name, checksum_address)

    def read_accessor(self, handle: Handle, accessor: str) -> Any:
        artifact = self._artifact(handle.name)
        contract = self.w3.eth.contract(address=handle.address, abi=artifact.abi)
        return getattr(contract.functions, accessor)().call()


Accessor = Union[int, Callable[[Tuple[Any, ...]], Any]]


class InMemoryPlatform:
    """
    Fake platform that hands out sequential addresses.

    ``accessors`` maps a component name to its readable state: each accessor
    is either the position of a constructor argument or a callable that
    receives the constructor arguments. Components listed in ``fail_on``
    raise on deployment.
    """

    def __init__(self, accessors: Optional[Dict[str, Dict[str, Accessor]]] = None,
                 fail_on: Iterable[str] = ()):
        self.accessors = accessors or {}
        self.fail_on = set(fail_on)
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self._instances: Dict[str, Tuple[str, Tuple[Any, ...]]] = {}

    def deploy_instance(self, name: str, args: Sequence[Any]) -> str:
        args = tuple(args)
        self.calls.append((name, args))
        if name in self.fail_on:
            raise RuntimeError(f"execution reverted while deploying {name}")
        address = Web3.to_checksum_address(f'0x{len(self._instances) + 1:040x}')
        self._instances[address] = (name, args)
        return address

    def instance(self, name: str, address: str) -> Handle:
        address = Web3.to_checksum_address(address)
        if address not in self._instances:
            raise NotDeployed(name)
        return Handle(name, address)

    def read_accessor(self, handle: Handle, accessor: str) -> Any:
        name, args = self._instances[handle.address]
        try:
            source = self.accessors[name][accessor]
        except KeyError:
            raise AttributeError(f"{name} has no accessor '{accessor}'")
        if callable(source):
            return source(args)
        return args[source]
