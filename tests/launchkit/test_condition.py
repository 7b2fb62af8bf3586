"""
Tests for environment condition evaluation.
"""

from unittest import mock

import pytest

from launchkit.condition import (
    ConditionEvaluator,
    CpuArchitectureValidator,
    EnvironmentContext,
    OperatingSystemValidator,
    default_validators,
)
from launchkit.launchkit_exceptions import NoSuchPropertyError
from launchkit.launchkit_utils import PlatformUtils
from launchkit.resource_models import RemoteNativeLibrary


def library(**conditions):
    return RemoteNativeLibrary(source_uri="https://natives.example.org/lib.so", conditions=conditions)


class TestEnvironmentContext:
    """Tests for EnvironmentContext."""

    def test_properties_are_read_only(self):
        context = EnvironmentContext({"os.name": "linux"})

        with pytest.raises(TypeError):
            context.properties["os.name"] = "windows"

    def test_copy_is_taken(self):
        properties = {"os.name": "linux"}
        context = EnvironmentContext(properties)
        properties["os.name"] = "windows"

        assert context.get_property("os.name") == "linux"

    def test_from_platform_overrides(self):
        context = EnvironmentContext.from_platform(cpu_architecture="arm64")

        assert context.get_property(PlatformUtils.CPU_ARCHITECTURE_PROPERTY) == "arm64"
        assert context.get_property(PlatformUtils.OS_NAME_PROPERTY) == PlatformUtils.get_os_name()

    def test_missing_property(self):
        assert EnvironmentContext().get_property("os.name") is None


class TestConditionEvaluator:
    """Tests for ConditionEvaluator and the built-in validators."""

    @pytest.fixture
    def linux_amd64(self, logger):
        context = EnvironmentContext({"os.name": "linux", "cpu.architecture": "amd64"})
        return ConditionEvaluator(context, default_validators(), logger)

    def test_no_conditions_is_applicable(self, linux_amd64):
        assert linux_amd64.is_applicable(library())

    def test_no_conditions_in_empty_environment(self, logger):
        evaluator = ConditionEvaluator(EnvironmentContext(), default_validators(), logger)

        assert evaluator.is_applicable(library())

    def test_matching_os(self, linux_amd64):
        assert linux_amd64.is_applicable(library(**{"os.name.contains": "linux"}))

    def test_other_os(self, linux_amd64):
        assert not linux_amd64.is_applicable(library(**{"os.name.contains": "windows"}))

    def test_substring_match(self, linux_amd64):
        assert linux_amd64.is_applicable(library(**{"cpu.architecture.contains": "64"}))

    def test_all_conditions_must_hold(self, linux_amd64):
        resource = library(**{"os.name.contains": "linux", "cpu.architecture.contains": "arm"})

        assert not linux_amd64.is_applicable(resource)

    def test_match_is_case_sensitive(self, linux_amd64):
        assert not linux_amd64.is_applicable(library(**{"os.name.contains": "Linux"}))

    def test_blank_condition_does_not_veto(self, linux_amd64):
        assert linux_amd64.is_applicable(library(**{"os.name.contains": "  "}))

    def test_unknown_condition_keys_are_ignored(self, linux_amd64):
        assert linux_amd64.is_applicable(library(**{"java.version.contains": "21"}))

    def test_missing_property_raises(self, logger):
        evaluator = ConditionEvaluator(EnvironmentContext({"os.name": "linux"}), default_validators(), logger)

        with pytest.raises(NoSuchPropertyError) as exc_info:
            evaluator.is_applicable(library(**{"cpu.architecture.contains": "64"}))

        assert exc_info.value.property_name == "cpu.architecture"

    def test_blank_property_raises(self, logger):
        evaluator = ConditionEvaluator(EnvironmentContext({"os.name": " "}), [OperatingSystemValidator()], logger)

        with pytest.raises(NoSuchPropertyError):
            evaluator.is_applicable(library(**{"os.name.contains": "linux"}))

    def test_stops_at_first_veto(self, logger):
        rejecting = mock.Mock()
        rejecting.validate.return_value = False
        never_called = mock.Mock()
        evaluator = ConditionEvaluator(EnvironmentContext(), [rejecting, never_called], logger)

        assert not evaluator.is_applicable(library(**{"os.name.contains": "linux"}))
        never_called.validate.assert_not_called()

    def test_validators_run_in_order(self, logger):
        calls = []
        first = mock.Mock()
        first.validate.side_effect = lambda context, conditions: calls.append("first") or True
        second = mock.Mock()
        second.validate.side_effect = lambda context, conditions: calls.append("second") or True
        evaluator = ConditionEvaluator(EnvironmentContext(), [first, second], logger)

        assert evaluator.is_applicable(library(**{"os.name.contains": "linux"}))
        assert calls == ["first", "second"]

    def test_filter_applicable(self, linux_amd64, linux_library, windows_library):
        assert linux_amd64.filter_applicable([linux_library, windows_library]) == [linux_library]

    def test_validator_keys(self):
        assert OperatingSystemValidator().condition_key == "os.name.contains"
        assert CpuArchitectureValidator().property_name == "cpu.architecture"
