"""
Deployment registry and the shared deployment directory.

The registry lives for a single orchestration run. The directory is the
``deployment.json`` file that outlives it and tells the verification
harness which instance of each component is the current one.
"""

import os
import json
import logging
import tempfile
from typing import Dict, Iterator, Optional

from .errors import DeploymentRecordCorrupt, DuplicateDeployment

logger = logging.getLogger(__name__)


class DeploymentRegistry:
    """Append-only mapping from component name to deployed address"""

    def __init__(self):
        self._addresses: Dict[str, str] = {}

    def record(self, name: str, address: str):
        if name in self._addresses:
            raise DuplicateDeployment(name)
        self._addresses[name] = address

    def get(self, name: str) -> Optional[str]:
        return self._addresses.get(name)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._addresses)

    def __getitem__(self, name: str) -> str:
        return self._addresses[name]

    def __contains__(self, name) -> bool:
        return name in self._addresses

    def __iter__(self) -> Iterator[str]:
        return iter(self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)

    def __repr__(self):
        return f"DeploymentRegistry({self._addresses!r})"


class DeploymentDirectory:
    """The most recently deployed instance per component, persisted as JSON"""

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise DeploymentRecordCorrupt(f"Deployment file {self.path} is not valid JSON: {e}")

    def load(self) -> Dict[str, str]:
        return dict(self._read().get('contracts', {}))

    def lookup(self, name: str) -> Optional[str]:
        return self.load().get(name)

    @property
    def network(self) -> Optional[str]:
        return self._read().get('network')

    def save(self, registry: DeploymentRegistry, network: str,
             chain_id: Optional[int] = None, deployer: Optional[str] = None):
        """
        Persist the addresses of a completed run.

        Entries from an earlier run on the same network are kept unless the
        new run redeployed them; a different network replaces the file.
        """
        existing = self._read()
        if existing.get('network') == network:
            contracts = dict(existing.get('contracts', {}))
            roles = dict(existing.get('roles', {}))
        else:
            contracts, roles = {}, {}

        contracts.update(registry.as_dict())
        if deployer:
            roles['deployer'] = deployer

        data = {
            'network': network,
            'chainId': chain_id,
            'contracts': contracts,
            'roles': roles,
        }

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        # Readers only ever see a complete file
        fd, tmp_path = tempfile.mkstemp(dir=directory or '.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

        logger.info(f"Saved {len(registry)} deployed addresses to {self.path}")
