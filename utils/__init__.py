# Utility modules for the meal planner
from .sanitizer import (
    sanitize_text, sanitize_line, sanitize_url, sanitize_recipe_name,
    sanitize_free_text, sanitize_source, sanitize_filename
)
