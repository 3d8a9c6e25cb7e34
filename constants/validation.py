"""
Validation Constants

Contains whitelist values for validating user input and data read
back from the store, so the planner only ever sees well-formed values.
"""

# Valid recipe categories (unknown values are stored as 'Other')
RECIPE_CATEGORIES = (
    'Meat', 'Fish', 'Vegetarian', 'Poultry', 'Pasta', 'Soup', 'Weekend', 'Other'
)
DEFAULT_CATEGORY = 'Other'

# Days of the week, Monday first (index == day_id)
DAY_NAMES = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')
ALL_DAYS = (0, 1, 2, 3, 4, 5, 6)

# Servings bounds
DEFAULT_SERVINGS = 4
MIN_SERVINGS = 1
MAX_SERVINGS = 100

# Maximum field lengths for security
MAX_LENGTHS = {
    'recipe_name': 200,
    'free_text': 200,
    'source': 500,
    'ingredient_name': 200,
    'unit': 20,
    'step_text': 5000,
}
