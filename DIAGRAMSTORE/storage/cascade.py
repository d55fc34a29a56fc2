"""Cascade coordination for diagram rename and delete.

A diagram owns six dependent collections. Deleting or re-keying a diagram
fans the change out to all of them concurrently. There is no rollback across
collections: every step is attempted, and if any fails the caller gets a
`CascadeFailure` listing the failed steps while the successful ones stay
applied.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Dict

from DIAGRAMSTORE.utils.error_handling import CascadeFailure, ErrorContext, log_error_with_context
from DIAGRAMSTORE.utils.logging import get_logger

logger = get_logger(__name__)


async def fan_out(operation: str, diagram_id: str, steps: Dict[str, Awaitable[object]]) -> None:
    """Run named steps concurrently and raise CascadeFailure if any failed."""
    names = list(steps)
    results = await asyncio.gather(*steps.values(), return_exceptions=True)

    failures: Dict[str, BaseException] = {}
    for name, result in zip(names, results):
        if isinstance(result, BaseException):
            failures[name] = result
            log_error_with_context(
                result,
                ErrorContext(operation=f"cascade {operation}", collection=name, diagram_id=diagram_id),
            )

    if failures:
        first = next(iter(failures.values()))
        raise CascadeFailure(operation, diagram_id, failures) from first

    logger.debug(f"Cascade {operation} of diagram {diagram_id!r} completed: {', '.join(names)}")
