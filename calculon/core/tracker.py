# calculon/core/tracker.py
"""
GoalTracker: one user's session against Supabase.

It owns the Supabase client (and with it the auth session), the last fetched
snapshot of goals, expenses and adjustments, the selected goal, the theme and
the expense rate limiter. Write operations validate first and raise
TrackerError subclasses; refreshes log failures and keep the previous snapshot.
"""
import logging
from typing import Any, Dict, List, Set, Union

from supabase import Client

from calculon.core import access, db
from calculon.core.budget import BudgetSummary, calculate_budget_progress
from calculon.core.errors import (
    AuthenticationError, NotFoundError, RateLimitError, StorageError, TrackerError,
)
from calculon.core.models import BudgetAdjustment, Expense, Goal
from calculon.core.rate_limit import RateLimiter
from calculon.core.validation import (
    BudgetAdjustmentForm, CollaboratorInviteForm, CredentialsForm, ExpenseForm,
    GoalForm, validate_form,
)

logger = logging.getLogger(__name__)


class GoalTracker:
    def __init__(self, supabase_client: Client,
                 rate_limiter: Union[RateLimiter, None] = None):
        self.client = supabase_client
        self.rate_limiter = rate_limiter or RateLimiter()
        self.user = None
        self.goals: List[Goal] = []
        self.expenses: List[Expense] = []
        self.adjustments: List[BudgetAdjustment] = []
        self.selected_goal_id: Union[str, None] = None
        self.theme = 'light'
        self._subscription = self.client.auth.on_auth_state_change(self.handle_auth_change)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    # --- Auth ---
    def handle_auth_change(self, event: str, session: Any) -> None:
        """Loads data when a new user signs in, clears it on sign out."""
        if session is None:
            logger.debug("Auth event %s without session, clearing state", event)
            self.clear()
            return

        user = getattr(session, 'user', None)
        if user is not None and (self.user is None or self.user.id != user.id):
            # nothing of the previous account may survive a failed refresh
            self.clear()
            self.user = user
            self.refresh()
            self.initialize_theme()

    def clear(self) -> None:
        self.user = None
        self.goals = []
        self.expenses = []
        self.adjustments = []
        self.selected_goal_id = None
        self.theme = 'light'

    def current_user(self):
        """Returns the authenticated user or None."""
        try:
            response = self.client.auth.get_user()
        except Exception as e:
            logger.error("Error fetching current user: %s", e)
            return None
        return response.user if response else None

    def is_authenticated(self) -> bool:
        try:
            return self.client.auth.get_session() is not None
        except Exception as e:
            logger.error("Error fetching session: %s", e)
            return False

    def _require_user(self):
        user = self.current_user()
        if user is None:
            raise AuthenticationError()
        return user

    def sign_up(self, email: str, password: str) -> None:
        form = validate_form(CredentialsForm, {"email": email, "password": password})
        try:
            response = self.client.auth.sign_up({"email": form.email, "password": form.password})
        except Exception as e:
            logger.error("Error creating account: %s", e)
            raise AuthenticationError("Failed to create account. Please try again.") from e

        if response.user is None:
            raise AuthenticationError("Failed to create account. Please try again.")

        # Without a session (email confirmation pending) the profile is left to
        # the database trigger or to the first goal creation.
        if response.session is not None:
            try:
                self._ensure_profile(response.user)
            except StorageError as e:
                logger.error("Error creating profile after sign up: %s", e)
            self.handle_auth_change('SIGNED_IN', response.session)

    def sign_in(self, email: str, password: str) -> None:
        form = validate_form(CredentialsForm, {"email": email, "password": password})
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": form.email, "password": form.password}
            )
        except Exception as e:
            logger.error("Error signing in: %s", e)
            raise AuthenticationError("Invalid email or password.") from e
        self.handle_auth_change('SIGNED_IN', response.session)

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except Exception as e:
            logger.error("Error logging out: %s", e)
            raise AuthenticationError("Failed to log out.") from e
        self.clear()

    def _ensure_profile(self, user) -> None:
        if db.get_profile(self.client, user.id) is None:
            db.add_profile(self.client, user.id, user.email)

    # --- Refresh ---
    def _accessible_goal_ids(self) -> Union[Set[str], None]:
        """Goal ids the current user may see, or None when nobody is logged in."""
        user = self.current_user()
        if user is None:
            return None
        return access.get_accessible_goal_ids(self.client, user.id)

    def refresh(self) -> None:
        try:
            goal_ids = self._accessible_goal_ids()
        except StorageError as e:
            logger.error("Error resolving accessible goals: %s", e)
            return
        if goal_ids is None:
            return
        self.refresh_goals(goal_ids)
        self.refresh_expenses(goal_ids)
        self.refresh_adjustments(goal_ids)

    def refresh_goals(self, goal_ids: Union[Set[str], None] = None) -> None:
        try:
            if goal_ids is None:
                goal_ids = self._accessible_goal_ids()
                if goal_ids is None:
                    return
            goals = access.fetch_goals(self.client, goal_ids)
        except StorageError as e:
            logger.error("Error in refresh_goals: %s", e)
            return

        self.goals = goals
        loaded_ids = [goal.id for goal in goals]
        if self.selected_goal_id not in loaded_ids:
            self.selected_goal_id = loaded_ids[0] if loaded_ids else None

    def refresh_expenses(self, goal_ids: Union[Set[str], None] = None) -> None:
        try:
            if goal_ids is None:
                goal_ids = self._accessible_goal_ids()
                if goal_ids is None:
                    return
            self.expenses = access.fetch_expenses(self.client, goal_ids)
        except StorageError as e:
            logger.error("Error in refresh_expenses: %s", e)

    def refresh_adjustments(self, goal_ids: Union[Set[str], None] = None) -> None:
        try:
            if goal_ids is None:
                goal_ids = self._accessible_goal_ids()
                if goal_ids is None:
                    return
            self.adjustments = access.fetch_adjustments(self.client, goal_ids)
        except StorageError as e:
            logger.error("Error in refresh_adjustments: %s", e)

    # --- Goals ---
    def get_goal(self, goal_id: Union[str, None] = None) -> Union[Goal, None]:
        goal_id = goal_id or self.selected_goal_id
        return next((goal for goal in self.goals if goal.id == goal_id), None)

    def select_goal(self, goal_id: str) -> Goal:
        goal = self.get_goal(goal_id)
        if goal is None:
            raise NotFoundError("Goal not found")
        self.selected_goal_id = goal.id
        return goal

    def create_goal(self, data: Dict[str, Any]) -> None:
        form = validate_form(GoalForm, data)
        user = self._require_user()
        try:
            self._ensure_profile(user)
            db.add_goal(self.client, user.id, form.name, form.target_amount, form.deadline)
        except StorageError as e:
            raise StorageError("Failed to create goal") from e
        self.refresh_goals()

    def delete_goal(self, goal_id: str) -> None:
        try:
            db.delete_goal(self.client, goal_id)
        except StorageError as e:
            raise StorageError("Failed to delete goal") from e

        if self.selected_goal_id == goal_id:
            remaining = [goal for goal in self.goals if goal.id != goal_id]
            self.selected_goal_id = remaining[0].id if remaining else None
        self.refresh_goals()

    # --- Expenses and adjustments ---
    def add_expense(self, data: Dict[str, Any]) -> None:
        form = validate_form(ExpenseForm, data)
        user = self._require_user()
        if not self.rate_limiter.allows():
            raise RateLimitError()
        try:
            db.add_expense(self.client, form.goal_id, form.amount, form.category,
                           form.date, user.id, form.notes)
        except StorageError as e:
            raise StorageError("Failed to add expense") from e
        # only stored expenses count against the limit
        self.rate_limiter.record()
        self.refresh_expenses()
        self.refresh_goals()

    def add_budget_adjustment(self, goal_id: str, data: Dict[str, Any]) -> None:
        form = validate_form(BudgetAdjustmentForm, data)
        user = self._require_user()
        try:
            db.add_budget_adjustment(self.client, goal_id, form.amount, form.reason, user.id)
        except StorageError as e:
            raise StorageError("Failed to add budget adjustment") from e
        self.refresh_adjustments()
        self.refresh_goals()

    # --- Sharing ---
    def share_goal(self, goal_id: str, data: Dict[str, Any]) -> None:
        """Adds the account registered under `email` as a collaborator."""
        form = validate_form(CollaboratorInviteForm, data)
        self._require_user()
        profile = db.get_profile_by_email(self.client, form.email)
        if profile is None:
            raise NotFoundError("User not found")
        db.add_collaborator(self.client, goal_id, profile.id, form.role)
        self.refresh_goals()

    # --- Progress ---
    def goal_summary(self, goal_id: Union[str, None] = None) -> Union[BudgetSummary, None]:
        goal = self.get_goal(goal_id)
        if goal is None:
            return None
        return calculate_budget_progress(goal, self.expenses, self.adjustments)

    def goal_expenses(self, goal_id: Union[str, None] = None) -> List[Expense]:
        goal_id = goal_id or self.selected_goal_id
        return [expense for expense in self.expenses if expense.goal_id == goal_id]

    def goal_adjustment_total(self, goal_id: str) -> float:
        return sum(a.amount for a in self.adjustments if a.goal_id == goal_id)

    # --- Theme ---
    def initialize_theme(self) -> None:
        user = self.current_user()
        if user is None:
            return
        try:
            setting = db.get_user_setting(self.client, user.id)
            if setting is not None:
                self.theme = setting.theme
            else:
                db.add_user_setting(self.client, user.id, 'light')
                self.theme = 'light'
        except TrackerError as e:
            logger.error("Error loading theme preference: %s", e)

    def toggle_theme(self) -> str:
        new_theme = 'dark' if self.theme == 'light' else 'light'
        user = self.current_user()
        if user is None:
            return self.theme
        try:
            db.upsert_user_theme(self.client, user.id, new_theme)
        except TrackerError as e:
            logger.error("Error saving theme preference: %s", e)
            return self.theme
        self.theme = new_theme
        return self.theme
