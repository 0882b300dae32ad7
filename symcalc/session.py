# session.py
"""Per-user calculator state: precision mode, history and accumulated error."""

import logging
from dataclasses import dataclass
from typing import Optional

from . import config_manager as config_manager
from . import MathEngine
from . import error as E
from .numeric import FLOAT_MAX, check_precision

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    expression: str
    result: str
    error_estimate: Optional[float]
    precision_bits: int


class MathToolState:
    """Owned by a single thread; the UI mutates it only from the Qt main thread."""

    def __init__(self, precision_bits=0, default_precision_bits=None):
        if default_precision_bits is None:
            default_precision_bits = int(config_manager.load_setting_value("default_precision_bits"))
        self.default_precision_bits = check_precision(default_precision_bits)
        self.precision_bits = check_precision(precision_bits)
        self.expression = ""
        self.error = None
        self.cumulative_error = 0.0
        self._history = []

    @property
    def history(self):
        return tuple(self._history)

    @property
    def is_precise(self):
        return self.precision_bits > 0

    def toggle_precision(self):
        """Flip between fast mode and the default precise width."""
        self.precision_bits = 0 if self.precision_bits else self.default_precision_bits
        self.cumulative_error = 0.0
        logger.debug("precision set to %d bits", self.precision_bits)
        return self.precision_bits

    def evaluate(self, expression):
        """Calculate `expression` and commit it to the history.

        Errors are stored as the user-facing message in `error` and
        re-raised; nothing is recorded for a failed calculation.
        """
        self.expression = expression
        try:
            if not expression or not expression.strip():
                raise E.MalformedExpressionError("Empty expression.", equation=expression)
            result, estimate = MathEngine.calculate(expression, self.precision_bits)
        except E.MathError as e:
            self.error = e.describe()
            raise
        return self.record(expression, result, estimate)

    def record(self, expression, result, estimate):
        entry = HistoryEntry(expression, result, estimate, self.precision_bits)
        self._history.append(entry)
        if estimate is not None:
            # Saturates instead of overflowing to inf
            self.cumulative_error = min(self.cumulative_error + estimate, FLOAT_MAX)
        self.expression = expression
        self.error = None
        return entry

    def clear_history(self):
        self._history.clear()
        self.error = None

    def run_external(self, source, entry, backend):
        """Run `entry` from `source` through a compile-and-run backend and record the value."""
        label = f"{entry}()"
        try:
            value = backend.execute(source, entry, self.precision_bits)
        except E.MathError as e:
            e.equation = label
            self.error = e.describe()
            raise
        estimate = MathEngine.estimate_error(value, 1, self.precision_bits)
        return self.record(label, MathEngine.format_result(value, self.precision_bits), estimate)
