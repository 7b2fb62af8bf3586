"""
Decides whether a conditional resource is needed in the current environment.
"""

import dataclasses
import logging
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Protocol, Sequence, TypeVar, runtime_checkable

from launchkit.launchkit_logger import LaunchkitLogger
from launchkit.launchkit_utils import PlatformUtils

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class EnvironmentContext:
    """
    An immutable snapshot of environment properties, captured once per run.
    """

    properties: Mapping[str, str] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.properties is None:
            raise TypeError("Environment context properties must not be None")
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def get_property(self, name: str) -> Optional[str]:
        return self.properties.get(name)

    @classmethod
    def from_platform(cls, **overrides: str) -> "EnvironmentContext":
        """
        Snapshot the running platform. Keyword overrides use underscores for dots,
        e.g. ``cpu_architecture="arm64"``.
        """
        properties = PlatformUtils.get_environment_properties()
        for key, value in overrides.items():
            properties[key.replace("_", ".")] = value
        return cls(properties)

    def __hash__(self) -> int:
        return hash(frozenset(self.properties.items()))


@runtime_checkable
class ConditionValidator(Protocol):
    """
    Checks one aspect of a resource's conditions against the environment.

    Returns False to veto the resource. Validators that do not apply to the
    given conditions return True.
    """

    def validate(self, context: EnvironmentContext, conditions: Mapping[str, str]) -> bool: ...


class ConditionEvaluator:
    """
    Evaluates resource conditions against a fixed environment and an ordered list of validators.
    """

    def __init__(
        self,
        context: EnvironmentContext,
        validators: Sequence[ConditionValidator],
        logger: Optional[LaunchkitLogger] = None,
    ):
        if context is None:
            raise TypeError("Environment context must not be None")
        if validators is None:
            raise TypeError("Validators must not be None")
        self.context = context
        self.validators: List[ConditionValidator] = list(validators)
        self.logger = logger or LaunchkitLogger()

    def is_applicable(self, resource) -> bool:
        """
        Check whether every validator accepts the resource's conditions.

        A resource without conditions is always applicable.

        Raises:
            NoSuchPropertyError: If a condition needs a property the context does not have
        """
        conditions = getattr(resource, "conditions", None)
        if not conditions:
            return True

        for validator in self.validators:
            if not validator.validate(self.context, conditions):
                self.logger.log(
                    f"Skipping {getattr(resource, 'identity', resource)}: "
                    f"{type(validator).__name__} rejected {dict(conditions)}",
                    logging.DEBUG,
                )
                return False

        return True

    def filter_applicable(self, resources: Iterable[T]) -> List[T]:
        return [resource for resource in resources if self.is_applicable(resource)]
