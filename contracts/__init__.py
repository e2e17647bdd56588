"""
Ubex Contracts
==============

On-chain components of the Ubex system including:
- SystemOwner: Holds the system owner identity
- AdamCoefficients: Stores the neural network coefficients
- UbexStorage: Persistent storage for the exchange
- UbexExchange: The exchange itself

The Solidity sources live outside this package; only their compiled
artifacts (Hardhat layout) are consumed here.
"""

import os
import json
from dataclasses import dataclass
from typing import Any, Dict, List

from deployment.errors import ArtifactNotFound

SYSTEM_OWNER = "SystemOwner"
ADAM_COEFFICIENTS = "AdamCoefficients"
UBEX_STORAGE = "UbexStorage"
UBEX_EXCHANGE = "UbexExchange"

__all__ = [
    'SYSTEM_OWNER',
    'ADAM_COEFFICIENTS',
    'UBEX_STORAGE',
    'UBEX_EXCHANGE',
    'Artifact',
    'artifact_path',
    'load_artifact',
]


@dataclass(frozen=True)
class Artifact:
    """Compiled contract data needed to deploy and query it"""
    name: str
    abi: List[Dict[str, Any]]
    bytecode: str


def artifact_path(name: str, artifacts_dir: str) -> str:
    return os.path.join(artifacts_dir, f'{name}.sol', f'{name}.json')


def load_artifact(name: str, artifacts_dir: str) -> Artifact:
    """Loads a contract ABI and bytecode from its JSON artifact."""
    path = artifact_path(name, artifacts_dir)
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ArtifactNotFound(f"No compiled artifact for {name} at {path}. Please compile contracts first.")

    try:
        return Artifact(name=name, abi=data['abi'], bytecode=data['bytecode'])
    except KeyError as e:
        raise ArtifactNotFound(f"Artifact for {name} at {path} has no {e} entry")
