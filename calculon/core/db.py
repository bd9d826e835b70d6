# calculon/core/db.py
import logging
from typing import Any, Dict, Iterable, List, Union

from postgrest.exceptions import APIError
from supabase import create_client, Client

from calculon.config import SUPABASE_URL, SUPABASE_KEY
from calculon.core.errors import ConflictError, StorageError
from calculon.core.models import (
    BudgetAdjustment, Expense, Goal, Profile, UserThemeSetting,
)

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def get_supabase_client() -> Client:
    """Returns a new Supabase client. Each client carries its own auth session."""
    return create_client(SUPABASE_URL, SUPABASE_KEY)


def _execute(query, action: str) -> List[Dict[str, Any]]:
    """Runs a PostgREST query, turning any failure into a StorageError."""
    try:
        return query.execute().data or []
    except Exception as e:
        logger.error("Error %s: %s", action, e)
        raise StorageError() from e


# --- Goals ---
def get_owned_goal_ids(supabase_client: Client, user_id: str) -> List[str]:
    rows = _execute(
        supabase_client.table('goals').select('id').eq('user_id', user_id),
        "fetching owned goals",
    )
    return [row['id'] for row in rows]


def get_collaborated_goal_ids(supabase_client: Client, user_id: str) -> List[str]:
    rows = _execute(
        supabase_client.table('collaborators').select('goal_id').eq('user_id', user_id),
        "fetching collaborated goals",
    )
    return [row['goal_id'] for row in rows]


def get_goals(supabase_client: Client, goal_ids: Iterable[str]) -> List[Goal]:
    """Goals with the given ids, newest first."""
    rows = _execute(
        supabase_client.table('goals').select('*')
        .in_('id', list(goal_ids))
        .order('created_at', desc=True),
        "fetching goals",
    )
    return [Goal.from_row(row) for row in rows]


def add_goal(supabase_client: Client, user_id: str, name: str,
             target_amount: float, deadline: str) -> None:
    _execute(
        supabase_client.table('goals').insert({
            "name": name,
            "target_amount": target_amount,
            "deadline": deadline,
            "user_id": user_id,
        }),
        "creating goal",
    )


def delete_goal(supabase_client: Client, goal_id: str) -> None:
    # Dependent expenses, adjustments and collaborators cascade in the database.
    _execute(
        supabase_client.table('goals').delete().eq('id', goal_id),
        "deleting goal",
    )


# --- Expenses ---
def get_expenses(supabase_client: Client, goal_ids: Iterable[str]) -> List[Expense]:
    """Expenses of the given goals, most recent date first."""
    rows = _execute(
        supabase_client.table('expenses').select('*')
        .in_('goal_id', list(goal_ids))
        .order('date', desc=True),
        "fetching expenses",
    )
    return [Expense.from_row(row) for row in rows]


def add_expense(supabase_client: Client, goal_id: str, amount: float, category: str,
                date: str, created_by: str, notes: Union[str, None] = None) -> None:
    _execute(
        supabase_client.table('expenses').insert({
            "goal_id": goal_id,
            "amount": amount,
            "category": category,
            "date": date,
            "notes": notes,
            "created_by": created_by,
        }),
        "adding expense",
    )


# --- Budget adjustments ---
def get_budget_adjustments(supabase_client: Client,
                           goal_ids: Iterable[str]) -> List[BudgetAdjustment]:
    rows = _execute(
        supabase_client.table('budget_adjustments').select('*')
        .in_('goal_id', list(goal_ids))
        .order('created_at', desc=True),
        "fetching budget adjustments",
    )
    return [BudgetAdjustment.from_row(row) for row in rows]


def add_budget_adjustment(supabase_client: Client, goal_id: str, amount: float,
                          reason: str, created_by: str) -> None:
    _execute(
        supabase_client.table('budget_adjustments').insert({
            "goal_id": goal_id,
            "amount": amount,
            "reason": reason,
            "created_by": created_by,
        }),
        "adding budget adjustment",
    )


# --- Profiles ---
def get_profile(supabase_client: Client, user_id: str) -> Union[Profile, None]:
    rows = _execute(
        supabase_client.table('profiles').select('id,email').eq('id', user_id),
        "fetching profile",
    )
    return Profile.from_row(rows[0]) if rows else None


def get_profile_by_email(supabase_client: Client, email: str) -> Union[Profile, None]:
    """Exact (case-sensitive) email match, as stored in `profiles`."""
    rows = _execute(
        supabase_client.table('profiles').select('id,email').eq('email', email).limit(1),
        "looking up profile by email",
    )
    return Profile.from_row(rows[0]) if rows else None


def add_profile(supabase_client: Client, user_id: str, email: str) -> None:
    _execute(
        supabase_client.table('profiles').insert({"id": user_id, "email": email}),
        "creating profile",
    )


# --- Collaborators ---
def add_collaborator(supabase_client: Client, goal_id: str, user_id: str,
                     role: str) -> None:
    """Raises ConflictError when the (goal, user) pair already exists."""
    try:
        supabase_client.table('collaborators').insert({
            "goal_id": goal_id,
            "user_id": user_id,
            "role": role,
        }).execute()
    except APIError as e:
        if e.code == UNIQUE_VIOLATION:
            raise ConflictError("This user is already a collaborator") from e
        logger.error("Error adding collaborator: %s", e)
        raise StorageError("Failed to add collaborator") from e
    except Exception as e:
        logger.error("Error adding collaborator: %s", e)
        raise StorageError("Failed to add collaborator") from e


# --- User settings ---
def get_user_setting(supabase_client: Client, user_id: str) -> Union[UserThemeSetting, None]:
    rows = _execute(
        supabase_client.table('user_settings').select('theme').eq('user_id', user_id).limit(1),
        "fetching user settings",
    )
    return UserThemeSetting(user_id, rows[0]['theme']) if rows else None


def add_user_setting(supabase_client: Client, user_id: str, theme: str = 'light') -> None:
    _execute(
        supabase_client.table('user_settings').insert({"user_id": user_id, "theme": theme}),
        "creating user settings",
    )


def upsert_user_theme(supabase_client: Client, user_id: str, theme: str) -> None:
    _execute(
        supabase_client.table('user_settings').upsert({"user_id": user_id, "theme": theme}),
        "saving theme preference",
    )
