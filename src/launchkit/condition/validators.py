"""
Built-in condition validators.
"""

from typing import List, Mapping

from launchkit.condition.evaluator import ConditionValidator, EnvironmentContext
from launchkit.launchkit_exceptions import NoSuchPropertyError
from launchkit.launchkit_utils import PlatformUtils


class PropertyContainsValidator:
    """
    Accepts a resource when an environment property contains the condition value.

    The condition is read from ``condition_key``; a blank or absent condition does
    not veto. A present condition with a blank or absent property raises
    NoSuchPropertyError.
    """

    def __init__(self, condition_key: str, property_name: str):
        self.condition_key = condition_key
        self.property_name = property_name

    def validate(self, context: EnvironmentContext, conditions: Mapping[str, str]) -> bool:
        condition_value = conditions.get(self.condition_key)

        if condition_value is None or not condition_value.strip():
            return True

        property_value = context.get_property(self.property_name)

        if property_value is None or not property_value.strip():
            raise NoSuchPropertyError(context, self.property_name)

        return condition_value in property_value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.condition_key!r} -> {self.property_name!r})"


class OperatingSystemValidator(PropertyContainsValidator):
    CONDITION_CONTAINS = "os.name.contains"

    def __init__(self):
        super().__init__(self.CONDITION_CONTAINS, PlatformUtils.OS_NAME_PROPERTY)


class CpuArchitectureValidator(PropertyContainsValidator):
    CONDITION_CONTAINS = "cpu.architecture.contains"

    def __init__(self):
        super().__init__(self.CONDITION_CONTAINS, PlatformUtils.CPU_ARCHITECTURE_PROPERTY)


def default_validators() -> List[ConditionValidator]:
    return [OperatingSystemValidator(), CpuArchitectureValidator()]
