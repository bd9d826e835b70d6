from .states import (
    ASKING_AMOUNT,
    ASKING_CATEGORY,
    ASKING_CONFIRMATION,
    ASKING_DATE,
    ASKING_DELETE_CONFIRMATION,
    ASKING_NOTES,
)
from .expense_flow import (
    cancel,
    handle_amount,
    handle_category,
    handle_confirmation,
    handle_date,
    handle_notes,
    start_expense,
)
from .delete_flow import handle_delete_confirmation, start_delete_goal
