"""Example: using the service layer directly (no Flask).

Controllers are a thin layer; the rules live in the services.
"""

from datetime import datetime

from src.community_registry.community_registry.core.constants import EVENT_TIMEZONE
from src.community_registry.community_registry.events.model import EventOccurrence
from src.community_registry.community_registry.events.service import CheckInWindowEvaluator


def main():
    evaluator = CheckInWindowEvaluator()
    worship = EventOccurrence(
        start_date="2024-02-27",
        end_date="2024-12-31",
        start_time="17:00",
        end_time="19:00",
        is_recurring=True,
        category="Community Worship",
    )
    now = datetime(2024, 3, 5, 12, 0, tzinfo=EVENT_TIMEZONE)
    evaluation = evaluator.evaluate(worship, now)
    print(evaluation.state.value, evaluation.can_check_in, evaluation.window.window_end.isoformat())


if __name__ == "__main__":
    main()
