"""
Deployment plans per environment.

A plan is the ordered list of components to deploy. ``StaticPlan`` trusts
the order its author wrote; ``TopologicalPlan`` derives one from the
``Ref`` slots. Environments without a plan get ``NoOpPlan`` and deploy
nothing.
"""

import logging
from typing import Dict, List, Protocol, Sequence

from contracts import ADAM_COEFFICIENTS, SYSTEM_OWNER, UBEX_EXCHANGE, UBEX_STORAGE

from .descriptors import ComponentDescriptor, Ref
from .errors import CyclicDependency, UnresolvedDependency

logger = logging.getLogger(__name__)


class PlanResolver(Protocol):
    def resolve(self) -> List[ComponentDescriptor]: ...


class StaticPlan:
    """Deploys components exactly in the order given"""

    def __init__(self, descriptors: Sequence[ComponentDescriptor]):
        self.descriptors = list(descriptors)

    def resolve(self) -> List[ComponentDescriptor]:
        return list(self.descriptors)


class TopologicalPlan:
    """Orders components so that every reference is deployed before its referrer"""

    def __init__(self, descriptors: Sequence[ComponentDescriptor]):
        self.descriptors = list(descriptors)

    def resolve(self) -> List[ComponentDescriptor]:
        known = {d.name for d in self.descriptors}
        for descriptor in self.descriptors:
            for dependency in descriptor.dependencies:
                if dependency not in known:
                    raise UnresolvedDependency(descriptor.name, dependency)

        ordered: List[ComponentDescriptor] = []
        placed = set()
        pending = list(self.descriptors)
        while pending:
            # First ready component in declaration order keeps the result stable
            ready = next(
                (d for d in pending if all(dep in placed for dep in d.dependencies)),
                None,
            )
            if ready is None:
                raise CyclicDependency(d.name for d in pending)
            ordered.append(ready)
            placed.add(ready.name)
            pending.remove(ready)
        return ordered


class NoOpPlan:
    """Plan for environments that deploy nothing"""

    def resolve(self) -> List[ComponentDescriptor]:
        return []


DEVELOPMENT_PLAN = [
    ComponentDescriptor(SYSTEM_OWNER),
    ComponentDescriptor(ADAM_COEFFICIENTS, (Ref(SYSTEM_OWNER),)),
    ComponentDescriptor(UBEX_STORAGE, (Ref(SYSTEM_OWNER),)),
    ComponentDescriptor(UBEX_EXCHANGE, (Ref(UBEX_STORAGE), Ref(ADAM_COEFFICIENTS), Ref(SYSTEM_OWNER))),
]

# No production plan yet: it is not known whether production mirrors development.
PLANS: Dict[str, PlanResolver] = {
    'development': StaticPlan(DEVELOPMENT_PLAN),
}


def resolve_plan(selector: str, plans: Dict[str, PlanResolver] = PLANS) -> List[ComponentDescriptor]:
    strategy = plans.get(selector)
    if strategy is None:
        logger.info(f"No deployment plan for '{selector}', skipping deployment")
        strategy = NoOpPlan()
    return strategy.resolve()


def is_dependency_ordered(plan: Sequence[ComponentDescriptor]) -> bool:
    seen = set()
    for descriptor in plan:
        if any(dep not in seen for dep in descriptor.dependencies):
            return False
        seen.add(descriptor.name)
    return True
