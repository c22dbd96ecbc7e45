import re

from alsader.errors import ValidationError

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_.-]{2,32}$")


def validate_username(username: str) -> None:
    """Usernames are 2-32 latin letters, digits, dots, dashes or underscores."""
    if not USERNAME_RE.fullmatch(username):
        raise ValidationError("Username must be 2-32 characters: letters, digits, '.', '-' or '_'")


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - No whitespace characters
    - Minimum length of 8 characters
    - At least one letter and one digit

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long")

    if any(char.isspace() for char in password):
        raise ValidationError("Password cannot contain whitespace characters")

    if not any(char.isalpha() for char in password) or not any(char.isdigit() for char in password):
        raise ValidationError("Password must contain at least one letter and one digit")
