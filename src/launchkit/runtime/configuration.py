"""
Pydantic model of everything needed to launch an application on a runtime.
"""

import pathlib
from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApplicationLaunchConfiguration(BaseModel):
    """
    Immutable launch inputs: entry point, classpath, runtime flags and application arguments.

    The classpath may be empty here; launching with an empty classpath is rejected
    by the executor.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    main_class: str = Field(..., description="Fully qualified name of the class to run")
    classpath_entries: Tuple[pathlib.Path, ...] = Field(default_factory=tuple)
    jvm_arguments: Tuple[str, ...] = Field(default_factory=tuple)
    application_arguments: Tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("main_class")
    @classmethod
    def _validate_main_class(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Main class (main_class) must not be blank")
        return value

    @field_validator("classpath_entries", "jvm_arguments", "application_arguments", mode="before")
    @classmethod
    def _default_sequences(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("classpath_entries", mode="before")
    @classmethod
    def _validate_classpath(cls, value: Any) -> Any:
        if isinstance(value, (str, pathlib.PurePath)):
            raise ValueError("classpath_entries must be a list of paths")
        return value
