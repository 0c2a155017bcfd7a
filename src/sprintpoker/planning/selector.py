"""Choose the sprint to plan from a board's sprints."""

from collections.abc import Sequence

from sprintpoker.core.logging import StructuredLogger
from sprintpoker.planning.models import Sprint

logger = StructuredLogger("planning.selector")

DEFAULT_EXCLUDED_MARKER = "DevOps"


def select_next_sprint(
    sprints: Sequence[Sprint],
    excluded_marker: str = DEFAULT_EXCLUDED_MARKER,
) -> Sprint | None:
    """Pick the sprint to size from sprints sorted most recent first.

    Prefers a future sprint whose name does not contain ``excluded_marker``,
    then an active sprint, then the most recent sprint in any state.

    Because the input is ordered by descending start date, the future
    sprint returned is the one starting latest, not the soonest upcoming.
    """
    future = [
        s for s in sprints
        if s.is_future and not (excluded_marker and excluded_marker in s.name)
    ]
    logger.info(f"Found {len(future)} future sprints")
    if future:
        return future[0]

    logger.info("No future sprints found, checking for active sprints...")
    active = [s for s in sprints if s.is_active]
    if active:
        logger.info(f"Using active sprint: {active[0].name} ({active[0].state})")
        return active[0]

    if sprints:
        logger.info(
            f"No active sprints found. Using most recent sprint: "
            f"{sprints[0].name} ({sprints[0].state})"
        )
        return sprints[0]

    return None
