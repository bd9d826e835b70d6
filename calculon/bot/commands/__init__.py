# calculon/bot/commands/__init__.py

from .utils import start_command, help_command
from .auth import login_command, logout_command, signup_command
from .goal import (
    adjust_command,
    goals_command,
    new_goal_command,
    select_command,
    share_command,
)
from .progress import expenses_command, progress_command, theme_command

ALL_COMMANDS = {
    "start": start_command,
    "help": help_command,
    "signup": signup_command,
    "login": login_command,
    "logout": logout_command,
    "goals": goals_command,
    "select": select_command,
    "newgoal": new_goal_command,
    "adjust": adjust_command,
    "share": share_command,
    "progress": progress_command,
    "expenses": expenses_command,
    "theme": theme_command,
}
