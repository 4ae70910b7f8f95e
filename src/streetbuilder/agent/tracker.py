"""
Goal bookkeeping for the mission.

GoalTracker accumulates quantities reported by the controller against
required amounts, keyed by (goal type, content). It only ever grows: the
controller pushes counts in and reads back how many goals are satisfied.

Dependencies:
    - streetbuilder.agent.interfaces: GoalType
    - streetbuilder.world: Content
"""

from __future__ import annotations

from dataclasses import dataclass

from streetbuilder.agent.interfaces import GoalType
from streetbuilder.world import Content


@dataclass
class Goal:
    """
    Progress toward one goal.

    Attributes:
        goal_type: What kind of progress is counted.
        content: Which content the goal is about.
        required: Quantity needed for completion.
        current: Quantity reported so far.
    """

    goal_type: GoalType
    content: Content
    required: int
    current: int = 0

    @property
    def completed(self) -> bool:
        return self.current >= self.required

    @property
    def fraction(self) -> float:
        return min(self.current / self.required, 1.0)


class GoalTracker:
    """
    Progress tracker keyed by (GoalType, Content).

    Example:
        >>> tracker = GoalTracker()
        >>> tracker.add_goal(GoalType.GET_ITEMS, Content.ROCK, 3)
        >>> tracker.update(GoalType.GET_ITEMS, Content.ROCK, 2)
        >>> tracker.completed_number()
        0
        >>> tracker.update(GoalType.GET_ITEMS, Content.ROCK, 1)
        >>> tracker.completed_number()
        1
    """

    __slots__ = ("_goals",)

    def __init__(self) -> None:
        self._goals: dict[tuple[GoalType, Content], Goal] = {}

    def add_goal(self, goal_type: GoalType, content: Content, required: int) -> None:
        """
        Register a goal. Re-adding an existing key raises its requirement
        but keeps the progress already made.

        Raises:
            ValueError: If required is not positive.
        """
        if required < 1:
            raise ValueError(f"required must be positive, got {required}")
        key = (goal_type, content)
        if key in self._goals:
            self._goals[key].required = max(self._goals[key].required, required)
        else:
            self._goals[key] = Goal(goal_type, content, required)

    def update(self, goal_type: GoalType, content: Content, quantity: int) -> None:
        """Add quantity to a goal. Unknown goals and non-positive counts are ignored."""
        goal = self._goals.get((goal_type, content))
        if goal is None or quantity <= 0:
            return
        goal.current += quantity

    def completed_number(self) -> int:
        return sum(1 for goal in self._goals.values() if goal.completed)

    def goals(self) -> list[Goal]:
        return list(self._goals.values())

    def get(self, goal_type: GoalType, content: Content) -> Goal | None:
        return self._goals.get((goal_type, content))
