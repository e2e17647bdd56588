"""
Deployment Errors
=================

Every failure the orchestrator and the verification harness can raise.
None of these are recovered locally: they propagate to the caller, which
decides whether to alert and abort.
"""


class DeploymentError(Exception):
    """Base class for all deployment and verification failures"""


class UnresolvedDependency(DeploymentError):
    """A reference slot points at a component that has not been deployed yet"""

    def __init__(self, component: str, missing: str):
        self.component = component
        self.missing = missing
        super().__init__(
            f"{component} depends on {missing}, which has not been deployed "
            f"(check the plan order)"
        )


class CyclicDependency(DeploymentError):
    """No deployment order exists for the given components"""

    def __init__(self, components):
        self.components = list(components)
        super().__init__(f"Cyclic dependency between: {', '.join(self.components)}")


class DeploymentActionFailed(DeploymentError):
    """The platform failed to deploy a component"""

    def __init__(self, component: str, cause: Exception):
        self.component = component
        self.cause = cause
        super().__init__(f"Deployment of {component} failed: {cause}")


class DuplicateDeployment(DeploymentError):
    """A component was recorded twice in the same registry"""

    def __init__(self, component: str):
        self.component = component
        super().__init__(f"{component} is already recorded in this deployment run")


class NotDeployed(DeploymentError):
    """No deployed instance is recorded for a component"""

    def __init__(self, component: str):
        self.component = component
        super().__init__(f"{component} has not been deployed. Please deploy contracts first.")


class AssertionFailed(DeploymentError):
    """A verified value does not match the expected one"""

    def __init__(self, message: str, actual, expected):
        self.actual = actual
        self.expected = expected
        super().__init__(f"{message}: expected {expected!r}, got {actual!r}")


class ArtifactNotFound(DeploymentError):
    """A compiled contract artifact is missing or incomplete"""


class AccessorReadFailed(DeploymentError):
    """Reading state from a deployed component failed"""

    def __init__(self, component: str, accessor: str, cause: Exception):
        self.component = component
        self.accessor = accessor
        self.cause = cause
        super().__init__(f"Reading {component}.{accessor}() failed: {cause}")


class DeploymentRecordCorrupt(DeploymentError):
    """The deployment file cannot be parsed"""
