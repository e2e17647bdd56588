import logging
from typing import Any, Dict, List

from .descriptors import ComponentDescriptor, Ref
from .errors import DeploymentActionFailed, DuplicateDeployment, UnresolvedDependency
from .plans import PLANS, PlanResolver, resolve_plan
from .platform import Platform
from .registry import DeploymentRegistry

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Deploys the plan of an environment one component at a time.

    Components are deployed strictly in plan order and each deployment is
    awaited before the next one starts. The first failure aborts the run;
    nothing is retried and the partial registry is not returned.
    """

    def __init__(self, platform: Platform, plans: Dict[str, PlanResolver] = PLANS):
        self.platform = platform
        self.plans = plans

    def resolve_plan(self, selector: str) -> List[ComponentDescriptor]:
        return resolve_plan(selector, self.plans)

    def _resolve_args(self, descriptor: ComponentDescriptor, registry: DeploymentRegistry) -> List[Any]:
        args = []
        for slot in descriptor.args:
            if isinstance(slot, Ref):
                if slot.name not in registry:
                    raise UnresolvedDependency(descriptor.name, slot.name)
                args.append(registry[slot.name])
            else:
                args.append(slot)
        return args

    def deploy(self, descriptor: ComponentDescriptor, registry: DeploymentRegistry) -> str:
        # Checked before the platform call: a second deployment cannot be undone
        if descriptor.name in registry:
            raise DuplicateDeployment(descriptor.name)
        args = self._resolve_args(descriptor, registry)
        logger.info(f"Deploying {descriptor.name} with arguments {args}")
        try:
            address = self.platform.deploy_instance(descriptor.name, args)
        except Exception as e:
            logger.error(f"Failed to deploy {descriptor.name}: {e}")
            raise DeploymentActionFailed(descriptor.name, e) from e

        registry.record(descriptor.name, address)
        logger.info(f"{descriptor.name} deployed at {address}")
        return address

    def run(self, selector: str) -> DeploymentRegistry:
        plan = self.resolve_plan(selector)
        registry = DeploymentRegistry()
        if plan:
            logger.info(f"Deploying {len(plan)} components for '{selector}': "
                        f"{', '.join(d.name for d in plan)}")
        for descriptor in plan:
            self.deploy(descriptor, registry)
        return registry
