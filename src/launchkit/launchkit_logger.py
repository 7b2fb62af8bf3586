"""
Multi-component logger for launchkit.
"""

import inspect
import logging
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel


class LogLine(BaseModel):
    """
    Represents a line in the launchkit log
    """

    time: str
    level: str
    caller_file: str
    caller_name: str
    caller_line: int
    message: str


class LaunchkitLogger:
    """
    Logger class
    """

    def __init__(self, name: str = "launchkit", level: Optional[Union[int, str]] = None) -> None:
        self.logger = logging.getLogger(name)
        if level is not None:
            self.set_level(level)
        elif self.logger.level == logging.NOTSET:
            self.logger.setLevel(logging.INFO)

    def set_level(self, level: Union[int, str]) -> None:
        if isinstance(level, str):
            level = level.upper()
        self.logger.setLevel(level)

    def log(self, debug_message: str, level: int) -> None:
        """
        Log the debug message as a single JSON line, tagged with the caller's location.
        """
        debug_message = debug_message.replace("\n", " ")

        caller_file = "<unknown>"
        caller_name = "<unknown>"
        caller_line = 0
        frame = inspect.currentframe()
        caller_frame = frame.f_back if frame is not None else None
        if caller_frame is not None:
            caller_file = caller_frame.f_code.co_filename.replace("\\", "/").split("/")[-1]
            caller_name = caller_frame.f_code.co_name
            caller_line = caller_frame.f_lineno
        del frame, caller_frame

        self.logger.log(
            level=level,
            msg=LogLine(
                time=str(datetime.now()),
                level=logging.getLevelName(level),
                caller_file=caller_file,
                caller_name=caller_name,
                caller_line=caller_line,
                message=debug_message,
            ).model_dump_json(),
        )
