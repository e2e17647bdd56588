from dataclasses import dataclass, field
from typing import Any, Tuple


@dataclass(frozen=True)
class Ref:
    """Constructor slot holding the deployed address of another component"""
    name: str


@dataclass(frozen=True)
class ComponentDescriptor:
    """
    A deployable component and its constructor arguments.

    Each slot in ``args`` is either a ``Ref`` to another component, resolved
    against the deployment registry at deploy time, or a literal value that
    is passed to the constructor unchanged.
    """
    name: str
    args: Tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept lists for convenience, store a tuple so descriptors stay hashable
        object.__setattr__(self, 'args', tuple(self.args))

    @property
    def dependencies(self) -> Tuple[str, ...]:
        seen = []
        for slot in self.args:
            if isinstance(slot, Ref) and slot.name not in seen:
                seen.append(slot.name)
        return tuple(seen)
