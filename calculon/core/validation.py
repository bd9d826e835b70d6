# calculon/core/validation.py
"""
Form schemas checked before anything is sent to Supabase.

Each form maps its fields to the message shown when that field is invalid;
`validate_form` collects them into a FormValidationError.
"""
import datetime
import math
import re
from typing import Any, ClassVar, Dict, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator

from calculon.core.errors import FormValidationError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

FormT = TypeVar("FormT", bound="Form")


def parse_positive_amount(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("Amount must be a positive number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError("Amount must be a positive number")
    if not math.isfinite(number) or number <= 0:
        raise ValueError("Amount must be a positive number")
    return number


def parse_date(value: Any) -> str:
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("Invalid date format")
    try:
        datetime.date.fromisoformat(value)
    except ValueError:
        raise ValueError("Invalid date format")
    return value


def strip_text(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class Form(BaseModel):
    field_messages: ClassVar[Dict[str, str]] = {}


class GoalForm(Form):
    name: str = Field(min_length=1)
    target_amount: float
    deadline: str

    field_messages: ClassVar[Dict[str, str]] = {
        "name": "Name is required",
        "target_amount": "Target amount must be a positive number",
        "deadline": "Invalid date format",
    }

    strip_name = field_validator("name", mode="before")(strip_text)
    check_amount = field_validator("target_amount", mode="before")(parse_positive_amount)
    check_deadline = field_validator("deadline", mode="before")(parse_date)


class ExpenseForm(Form):
    amount: float
    category: str = Field(min_length=1)
    date: str
    notes: Optional[str] = None
    goal_id: str

    field_messages: ClassVar[Dict[str, str]] = {
        "amount": "Amount must be a positive number",
        "category": "Please select a category",
        "date": "Invalid date format",
        "goal_id": "Invalid goal ID",
    }

    check_amount = field_validator("amount", mode="before")(parse_positive_amount)
    strip_category = field_validator("category", mode="before")(strip_text)
    check_date = field_validator("date", mode="before")(parse_date)

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("goal_id", mode="before")
    @classmethod
    def check_goal_id(cls, value):
        if not isinstance(value, str) or not UUID_PATTERN.match(value):
            raise ValueError("Invalid goal ID")
        return value


class BudgetAdjustmentForm(Form):
    amount: float
    reason: str = Field(min_length=1)

    field_messages: ClassVar[Dict[str, str]] = {
        "amount": "Amount must be a positive number",
        "reason": "Please provide a reason for the adjustment",
    }

    check_amount = field_validator("amount", mode="before")(parse_positive_amount)
    strip_reason = field_validator("reason", mode="before")(strip_text)


class CollaboratorInviteForm(Form):
    email: EmailStr
    role: Literal["viewer", "editor", "admin"] = "viewer"

    field_messages: ClassVar[Dict[str, str]] = {
        "email": "Invalid email address",
        "role": "Please select a role",
    }


class CredentialsForm(Form):
    email: EmailStr
    password: str = Field(min_length=6)

    field_messages: ClassVar[Dict[str, str]] = {
        "email": "Invalid email address",
        "password": "Password must be at least 6 characters",
    }


def validate_form(form_cls: Type[FormT], data: Dict[str, Any]) -> FormT:
    """Builds `form_cls` from raw input or raises FormValidationError."""
    try:
        return form_cls(**data)
    except ValidationError as e:
        fields: Dict[str, str] = {}
        for error in e.errors():
            name = str(error["loc"][0]) if error["loc"] else "__all__"
            fields.setdefault(name, form_cls.field_messages.get(name, error["msg"]))
        raise FormValidationError(fields) from e
