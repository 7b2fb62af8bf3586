"""
Variable substitution for launch arguments.
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Pattern, Sequence, Set, Union

DEFAULT_VARIABLE_PATTERN = r"\$\{([^}]+)\}"


class Preprocessor:
    """
    Replaces variables such as ``${user_name}`` in argument strings.

    The first group of the pattern is the variable name. Variables without a
    value are left untouched.
    """

    def __init__(
        self,
        variable_pattern: Union[str, Pattern[str]] = DEFAULT_VARIABLE_PATTERN,
        variables: Optional[Mapping[str, Any]] = None,
    ):
        self.variable_pattern = re.compile(variable_pattern) if isinstance(variable_pattern, str) else variable_pattern
        self.variables: Dict[str, Any] = dict(variables or {})

    def clear_variables(self) -> None:
        self.variables.clear()

    def get_variables(self) -> Set[str]:
        return set(self.variables)

    def set_variables(self, variables: Mapping[str, Any]) -> None:
        if variables is None:
            raise TypeError("Variables must not be None")
        self.variables.update(variables)

    def set_variable(self, name: str, value: Any) -> None:
        if name is None:
            raise TypeError("Variable name must not be None")
        self.variables[name] = value

    def get_value(self, name: str, default: Any = None) -> Any:
        return self.variables.get(name, default)

    def preprocess(self, text: str) -> str:
        def replace(match: "re.Match[str]") -> str:
            value = self.variables.get(match.group(1))
            return match.group(0) if value is None else str(value)

        return self.variable_pattern.sub(replace, text)

    def preprocess_all(self, words: Sequence[str]) -> List[str]:
        return [self.preprocess(word) for word in words]
