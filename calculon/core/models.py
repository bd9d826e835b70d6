# calculon/core/models.py
from typing import Any, Dict, Optional

# Plain records built from Supabase rows. No behavior beyond construction.

ROLES = ("viewer", "editor", "admin")
THEMES = ("light", "dark")


class Profile:
    def __init__(self, id: str, email: str, created_at: Optional[str] = None):
        self.id = id
        self.email = email
        self.created_at = created_at

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Profile":
        return cls(row["id"], row["email"], row.get("created_at"))


class Goal:
    def __init__(self, id: str, user_id: str, name: str, target_amount: float,
                 deadline: str, current_amount: float = 0.0,
                 created_at: Optional[str] = None):
        self.id = id
        self.user_id = user_id
        self.name = name
        self.target_amount = target_amount
        self.current_amount = current_amount
        self.deadline = deadline
        self.created_at = created_at

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Goal":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            target_amount=float(row["target_amount"]),
            deadline=row["deadline"],
            current_amount=float(row.get("current_amount") or 0),
            created_at=row.get("created_at"),
        )


class Expense:
    def __init__(self, id: str, goal_id: str, amount: float, category: str,
                 date: str, notes: Optional[str] = None,
                 created_by: Optional[str] = None,
                 created_at: Optional[str] = None):
        self.id = id
        self.goal_id = goal_id
        self.amount = amount
        self.category = category
        self.date = date
        self.notes = notes
        self.created_by = created_by
        self.created_at = created_at

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Expense":
        return cls(
            id=row["id"],
            goal_id=row["goal_id"],
            amount=float(row["amount"]),
            category=row["category"],
            date=row["date"],
            notes=row.get("notes"),
            created_by=row.get("created_by"),
            created_at=row.get("created_at"),
        )


class BudgetAdjustment:
    def __init__(self, id: str, goal_id: str, amount: float, reason: str,
                 created_by: Optional[str] = None,
                 created_at: Optional[str] = None):
        self.id = id
        self.goal_id = goal_id
        self.amount = amount
        self.reason = reason
        self.created_by = created_by
        self.created_at = created_at

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "BudgetAdjustment":
        return cls(
            id=row["id"],
            goal_id=row["goal_id"],
            amount=float(row["amount"]),
            reason=row["reason"],
            created_by=row.get("created_by"),
            created_at=row.get("created_at"),
        )


class Collaborator:
    def __init__(self, id: str, goal_id: str, user_id: str, role: str = "viewer",
                 created_at: Optional[str] = None):
        self.id = id
        self.goal_id = goal_id
        self.user_id = user_id
        self.role = role
        self.created_at = created_at

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Collaborator":
        return cls(row["id"], row["goal_id"], row["user_id"],
                   row.get("role", "viewer"), row.get("created_at"))


class UserThemeSetting:
    def __init__(self, user_id: str, theme: str = "light"):
        self.user_id = user_id
        self.theme = theme
