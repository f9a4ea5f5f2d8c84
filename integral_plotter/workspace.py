"""Multi-function workspace driven once per UI frame.

Purpose
-------
``Workspace`` is the host-facing object: an ordered list of function slots
that share one viewport and one set of integral settings. ``refresh`` runs
every slot once and reports per-slot outputs, areas and errors together with
the time the whole pass took.

Architecture notes
------------------
Slots are independent. A slot whose expression fails to parse is reported in
``RefreshReport.errors`` and simply has no output this frame; the other
slots are unaffected, and the failing slot keeps its previous output in
``FunctionSlot.last_output``.

Logging
-------
Uses the standard :mod:`logging` framework (no prints) with a
``NullHandler``. Enable with::

    import logging
    logging.basicConfig(level=logging.DEBUG)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Union

from .IntegrationResult import QuadratureRule
from .defaults import (
    DEFAULT_EXPRESSION,
    DEFAULT_INTEGRAL_MAX_X,
    DEFAULT_INTEGRAL_MIN_X,
    DEFAULT_INTEGRAL_NUM,
    DEFAULT_MAX_X,
    DEFAULT_MIN_X,
    DEFAULT_PIXEL_WIDTH,
    DEFAULT_RULE,
)
from .errors import IntegralPlotterError
from .function_slot import FunctionSlot, SlotOutput
from .refresh_request import RefreshRequest
from .riemann_integrator import IntegralSettings

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass
class SlotEntry:
    """One row of the function list: text, integral toggle and its slot."""

    expression: str
    integral: bool
    slot: FunctionSlot


@dataclass(frozen=True)
class RefreshReport:
    """Result of one :meth:`Workspace.refresh` pass.

    Parameters
    ----------
    outputs : tuple[SlotOutput or None, ...]
        Per-slot output; ``None`` for blank or failed slots.
    errors : tuple[tuple[int, str], ...]
        ``(slot index, message)`` for every slot that failed.
    elapsed : float
        Wall-clock seconds spent in the pass.
    """

    outputs: tuple[Optional[SlotOutput], ...]
    errors: tuple[tuple[int, str], ...] = ()
    elapsed: float = 0.0

    @property
    def areas(self) -> tuple[Optional[float], ...]:
        """Signed area per slot, ``None`` where there is no integral."""
        return tuple(None if out is None else out.area for out in self.outputs)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class Workspace:
    """Ordered collection of function slots sharing viewport and integral settings.

    Parameters
    ----------
    settings : IntegralSettings, optional
        Shared integral configuration.
    workers : int, optional
        Thread count handed to every slot.
    """

    settings: IntegralSettings = field(
        default_factory=lambda: IntegralSettings(
            min_x=DEFAULT_INTEGRAL_MIN_X,
            max_x=DEFAULT_INTEGRAL_MAX_X,
            rectangle_count=DEFAULT_INTEGRAL_NUM,
            rule=DEFAULT_RULE,
        )
    )
    workers: int = 1
    entries: list[SlotEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.entries:
            self.add_function(DEFAULT_EXPRESSION)

    def __len__(self) -> int:
        return len(self.entries)

    def add_function(self, expression: str = "", *, integral: bool = False) -> FunctionSlot:
        """Append a function entry and return its slot."""
        slot = FunctionSlot(workers=self.workers)
        self.entries.append(SlotEntry(expression=expression, integral=integral, slot=slot))
        return slot

    def remove_function(self, index: int) -> None:
        """Remove the entry at ``index``; the last remaining entry cannot be removed."""
        if len(self.entries) <= 1:
            raise ValueError("A workspace always keeps at least one function.")
        del self.entries[index]

    def set_expression(self, index: int, expression: str) -> None:
        self.entries[index].expression = expression

    def set_integral(self, index: int, enabled: bool) -> None:
        self.entries[index].integral = bool(enabled)

    def toggle_integral(self, index: int) -> bool:
        """Flip integration for one entry and return the new state."""
        entry = self.entries[index]
        entry.integral = not entry.integral
        return entry.integral

    def set_integral_bounds(self, min_x: Optional[float] = None, max_x: Optional[float] = None) -> IntegralSettings:
        """Move the shared integral bounds, reverting a move that empties the range."""
        self.settings = self.settings.with_bounds(min_x=min_x, max_x=max_x)
        return self.settings

    def set_rectangle_count(self, rectangle_count: int) -> IntegralSettings:
        self.settings = self.settings.with_rectangle_count(rectangle_count)
        return self.settings

    def set_rule(self, rule: Union[QuadratureRule, str]) -> IntegralSettings:
        self.settings = self.settings.with_rule(rule)
        return self.settings

    def refresh(
        self,
        min_x: float = DEFAULT_MIN_X,
        max_x: float = DEFAULT_MAX_X,
        pixel_width: int = DEFAULT_PIXEL_WIDTH,
    ) -> RefreshReport:
        """
        Run every slot once for the given viewport.

        Returns
        -------
        RefreshReport
            Outputs, errors and timing of this pass.

        Raises
        ------
        PreconditionViolation
            If the viewport itself is invalid (``min_x >= max_x`` or
            ``pixel_width < 1``). No slot is touched in that case.
        """
        start = time.perf_counter()
        # Viewport problems are shared by all slots; fail before touching any.
        RefreshRequest(expression="", min_x=min_x, max_x=max_x, pixel_width=pixel_width).validate()

        outputs: list[Optional[SlotOutput]] = []
        errors: list[tuple[int, str]] = []
        for index, entry in enumerate(self.entries):
            if entry.expression.strip() == "":
                outputs.append(None)
                continue
            request = self._request_for(entry, min_x, max_x, pixel_width)
            try:
                outputs.append(entry.slot.refresh(request))
            except IntegralPlotterError as exc:
                logger.debug("slot %d failed: %s", index, exc)
                outputs.append(None)
                errors.append((index, str(exc)))

        elapsed = time.perf_counter() - start
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("refresh of %d slots took %.2f ms", len(self.entries), 1000.0 * elapsed)
        return RefreshReport(outputs=tuple(outputs), errors=tuple(errors), elapsed=elapsed)

    def _request_for(self, entry: SlotEntry, min_x: float, max_x: float, pixel_width: int) -> RefreshRequest:
        if not entry.integral:
            return RefreshRequest(
                expression=entry.expression,
                min_x=min_x,
                max_x=max_x,
                pixel_width=pixel_width,
            )
        return RefreshRequest(
            expression=entry.expression,
            min_x=min_x,
            max_x=max_x,
            pixel_width=pixel_width,
            integration_enabled=True,
            integral_min_x=self.settings.min_x,
            integral_max_x=self.settings.max_x,
            rectangle_count=self.settings.rectangle_count,
            rule=self.settings.rule,
        )
