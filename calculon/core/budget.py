# calculon/core/budget.py
from typing import Dict, Iterable, List, Tuple

from calculon.core.models import BudgetAdjustment, Expense, Goal

WARNING_THRESHOLD = 90
OVER_BUDGET_THRESHOLD = 100
EMPTY_SLICE = ("Empty", 100.0)


class BudgetSummary:
    """Progress of one goal against its adjusted budget."""

    def __init__(self, goal_id: str, adjusted_budget: float, total_spent: float,
                 total_adjustments: float, progress_percentage: float,
                 category_breakdown: Dict[str, float]):
        self.goal_id = goal_id
        self.adjusted_budget = adjusted_budget
        self.total_spent = total_spent
        self.total_adjustments = total_adjustments
        self.progress_percentage = progress_percentage
        self.category_breakdown = category_breakdown
        self.over_budget_warning = progress_percentage >= WARNING_THRESHOLD
        self.is_over_budget = progress_percentage > OVER_BUDGET_THRESHOLD

    @property
    def display_percentage(self) -> float:
        """Percentage clamped to 100, for gauges. Flags use the raw value."""
        return min(self.progress_percentage, 100.0)

    @property
    def remaining(self) -> float:
        return self.adjusted_budget - self.total_spent


def category_breakdown(expenses: Iterable[Expense]) -> Dict[str, float]:
    """Sums expense amounts per category, keeping first-seen order."""
    totals: Dict[str, float] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, 0.0) + expense.amount
    return totals


def chart_slices(breakdown: Dict[str, float]) -> List[Tuple[str, float]]:
    """Slices for the category ring. An empty breakdown becomes a single placeholder."""
    if not breakdown:
        return [EMPTY_SLICE]
    return list(breakdown.items())


def calculate_budget_progress(goal: Goal, expenses: Iterable[Expense],
                              adjustments: Iterable[BudgetAdjustment]) -> BudgetSummary:
    goal_expenses = [e for e in expenses if e.goal_id == goal.id]
    goal_adjustments = [a for a in adjustments if a.goal_id == goal.id]

    total_spent = sum(e.amount for e in goal_expenses)
    total_adjustments = sum(a.amount for a in goal_adjustments)
    adjusted_budget = goal.target_amount + total_adjustments

    if adjusted_budget > 0:
        progress_percentage = (total_spent / adjusted_budget) * 100
    else:
        progress_percentage = 0.0

    return BudgetSummary(
        goal_id=goal.id,
        adjusted_budget=adjusted_budget,
        total_spent=total_spent,
        total_adjustments=total_adjustments,
        progress_percentage=progress_percentage,
        category_breakdown=category_breakdown(goal_expenses),
    )
