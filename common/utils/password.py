"""
Password acceptance policy.

Configurable password validation. A policy is any callable taking the
plaintext and returning ``(is_valid, errors)``, so the rule can change
without touching the code that hashes and stores passwords.

Example:
    from common.utils import validate_password, make_password_policy

    # Basic validation
    is_valid, errors = validate_password("weakpass")
    if not is_valid:
        print("Password errors:", errors)

    # Policy bound to application settings
    policy = make_password_policy(min_length=10)
    is_valid, errors = policy("MyP@ss123")
"""

import re
from functools import partial
from typing import Callable, List, Tuple, Optional, Sequence

PasswordPolicy = Callable[[str], Tuple[bool, List[str]]]

CHARACTER_CLASSES = {
    "uppercase": (r"[A-Z]", "an uppercase letter"),
    "lowercase": (r"[a-z]", "a lowercase letter"),
    "digit": (r"\d", "a digit"),
    "symbol": (r"[^A-Za-z0-9\s]", "a symbol"),
}

COMMON_PASSWORDS = frozenset([
    "123456",
    "password",
    "12345678",
    "qwerty",
    "123456789",
    "12345",
    "1234",
    "111111",
    "1234567",
    "dragon",
    "123123",
    "baseball",
    "iloveyou",
    "trustno1",
    "sunshine",
    "princess",
    "football",
    "welcome",
    "shadow",
    "superman",
    "michael",
    "ninja",
    "mustang",
    "password1",
    "password123",
    "admin",
    "letmein",
    "monkey",
    "abc123",
    "starwars",
])


def validate_password(
    password: str,
    min_length: int = 8,
    max_length: int = 128,
    require_any_of: Sequence[str] = ("uppercase", "digit", "symbol"),
    require_all_of: Sequence[str] = (),
    reject_common: bool = True,
    disallowed_patterns: Optional[List[str]] = None,
) -> Tuple[bool, List[str]]:
    """
    Validate password strength.

    Args:
        password: The password to validate
        min_length: Minimum password length
        max_length: Maximum password length
        require_any_of: Character classes of which at least one must appear
        require_all_of: Character classes that must all appear
        reject_common: Reject passwords from the built-in common list
        disallowed_patterns: List of regex patterns that are not allowed

    Returns:
        Tuple of (is_valid: bool, errors: List[str])

    Examples:
        >>> is_valid, errors = validate_password("weak")
        >>> print(is_valid)
        False
        >>> print(errors)
        ['Password must be at least 8 characters', ...]

        >>> is_valid, errors = validate_password("Str0ngP@ss")
        >>> print(is_valid)
        True
    """
    errors: List[str] = []

    # Check length
    if len(password) < min_length:
        errors.append(f"Password must be at least {min_length} characters")

    if len(password) > max_length:
        errors.append(f"Password must be no more than {max_length} characters")

    # Check character requirements
    if require_any_of and not any(
        re.search(CHARACTER_CLASSES[name][0], password) for name in require_any_of
    ):
        labels = " or ".join(CHARACTER_CLASSES[name][1] for name in require_any_of)
        errors.append(f"Password must contain at least {labels}")

    for name in require_all_of:
        pattern, label = CHARACTER_CLASSES[name]
        if not re.search(pattern, password):
            errors.append(f"Password must contain at least {label}")

    if reject_common and check_common_passwords(password):
        errors.append("Password is too common")

    # Check disallowed patterns
    if disallowed_patterns:
        for pattern in disallowed_patterns:
            if re.search(pattern, password, re.IGNORECASE):
                errors.append("Password contains disallowed pattern")
                break

    return len(errors) == 0, errors


def check_common_passwords(
    password: str,
    common_passwords: Optional[frozenset] = None,
) -> bool:
    """
    Check if password is in a list of common passwords.

    Args:
        password: The password to check
        common_passwords: Set of lowercase common passwords. If None, uses built-in list.

    Returns:
        True if password is common (should be rejected)
    """
    if common_passwords is None:
        common_passwords = COMMON_PASSWORDS
    return password.lower() in common_passwords


def make_password_policy(
    min_length: int = 8,
    max_length: int = 128,
    **options,
) -> PasswordPolicy:
    """Bind validate_password to fixed limits, producing a PasswordPolicy."""
    return partial(validate_password, min_length=min_length, max_length=max_length, **options)
