"""
Logger used by every dynget component.
"""

import logging


class DyngetLogger:
    """
    Thin wrapper over the standard library logger named "dynget".

    Components receive an instance in their constructor and call log() with
    an explicit level, so hosts can redirect or silence dynget independently.
    """

    def __init__(self, name: str = "dynget", level: int = logging.INFO) -> None:
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

    def log(self, debug_message: str, level: int) -> None:
        """
        Log a single-line message at the given level.
        """
        debug_message = debug_message.replace("\n", " ")
        self.logger.log(level=level, msg=f"[dynget] {debug_message}")
