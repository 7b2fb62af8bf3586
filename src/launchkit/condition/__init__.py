"""
Environment conditions for resources.

This package decides, given a resource's declared conditions and an
environment snapshot, whether the resource is needed on this machine.
"""

from .evaluator import ConditionEvaluator, ConditionValidator, EnvironmentContext
from .validators import (
    CpuArchitectureValidator,
    OperatingSystemValidator,
    PropertyContainsValidator,
    default_validators,
)

__all__ = [
    "ConditionEvaluator",
    "ConditionValidator",
    "EnvironmentContext",
    "CpuArchitectureValidator",
    "OperatingSystemValidator",
    "PropertyContainsValidator",
    "default_validators",
]
