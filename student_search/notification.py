"""User-visible error notifications."""

import logging
from typing import Callable, List, Optional


class Notifier:
    """Surfaces failures to the user.

    The default only logs; pass ``sink`` to route errors to a real display
    (toast, status bar, CLI output).
    """

    def __init__(
        self,
        sink: Optional[Callable[[BaseException], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.sink = sink
        self.logger = logger or logging.getLogger(__name__)
        self.shown: List[BaseException] = []

    def exception(self, error: BaseException) -> None:
        cause = error.__cause__
        if cause is not None:
            self.logger.error(f"{error} (caused by: {cause})")
        else:
            self.logger.error(str(error))
        self.shown.append(error)
        if self.sink is not None:
            self.sink(error)
