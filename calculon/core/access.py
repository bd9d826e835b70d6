# calculon/core/access.py
"""
Which goals (and therefore which expenses and adjustments) a user may see.

A user can access the goals they own plus the goals they are listed on as a
collaborator. The two sets come from separate queries and are unioned here,
so the storage backend only has to support equality and "in" filters.
The fetch_* helpers take an already resolved id set so one refresh resolves
it once.
"""
from typing import Iterable, List, Set

from supabase import Client

from calculon.core import db
from calculon.core.models import BudgetAdjustment, Expense, Goal


def get_accessible_goal_ids(supabase_client: Client, user_id: str) -> Set[str]:
    owned = db.get_owned_goal_ids(supabase_client, user_id)
    collaborated = db.get_collaborated_goal_ids(supabase_client, user_id)
    return set(owned) | set(collaborated)


def fetch_goals(supabase_client: Client, goal_ids: Iterable[str]) -> List[Goal]:
    goal_ids = set(goal_ids)
    if not goal_ids:
        return []
    return db.get_goals(supabase_client, sorted(goal_ids))


def fetch_expenses(supabase_client: Client, goal_ids: Iterable[str]) -> List[Expense]:
    goal_ids = set(goal_ids)
    if not goal_ids:
        return []
    return db.get_expenses(supabase_client, sorted(goal_ids))


def fetch_adjustments(supabase_client: Client, goal_ids: Iterable[str]) -> List[BudgetAdjustment]:
    goal_ids = set(goal_ids)
    if not goal_ids:
        return []
    return db.get_budget_adjustments(supabase_client, sorted(goal_ids))
