# --- Conversation states ---
ASKING_AMOUNT = 0
ASKING_CATEGORY = 1
ASKING_DATE = 2
ASKING_NOTES = 3
ASKING_CONFIRMATION = 4
ASKING_DELETE_CONFIRMATION = 5

YES_ANSWERS = ("yes ✅", "yes", "y")
NO_ANSWERS = ("no ❌", "no", "n")
CONFIRM_KEYBOARD = [["Yes ✅", "No ❌"]]
