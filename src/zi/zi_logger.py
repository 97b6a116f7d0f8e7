"""
Logger used throughout zi.

Every record is a single JSON line describing where it was logged from,
which keeps log output greppable when several downloads are chained.
"""

import inspect
import logging

from pydantic import BaseModel


class LogLine(BaseModel):
    """
    Represents a line in the zi log
    """

    caller_file: str
    caller_name: str
    caller_line: int
    level: str
    message: str


class ZiLogger:
    """
    Logger class
    """

    def __init__(self, name: str = "zi") -> None:
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

    def log(self, debug_message: str, level: int) -> None:
        """
        Log the debug message with the caller's location attached
        """
        debug_message = debug_message.replace("\n", " ")

        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        try:
            if caller is not None:
                caller_file = caller.f_code.co_filename.replace("\\", "/").split("/")[-1]
                caller_name = caller.f_code.co_name
                caller_line = caller.f_lineno
            else:
                caller_file, caller_name, caller_line = "<unknown>", "<unknown>", 0
        finally:
            del frame, caller

        debug_log_line = LogLine(
            caller_file=caller_file,
            caller_name=caller_name,
            caller_line=caller_line,
            level=logging.getLevelName(level),
            message=debug_message,
        )

        self.logger.log(level=level, msg=debug_log_line.model_dump_json())

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)
