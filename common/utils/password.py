"""
Password hashing and strength validation.

Example:
    from common.utils import hash_password, verify_password, validate_password

    is_valid, errors = validate_password("weakpass")
    if not is_valid:
        print("Password errors:", errors)

    hashed = hash_password("MyP@ss123")
    assert verify_password("MyP@ss123", hashed)
"""

import base64
import hashlib
import re
from typing import Dict, List, Tuple, Optional, Union

import bcrypt as bcrypt_lib


def _prehash_password(password: str) -> str:
    """
    Pre-hash password with SHA-256 before bcrypt.

    This handles bcrypt's 72-byte limit and ensures consistent
    behavior across all password lengths.
    """
    sha256_hash = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(sha256_hash).decode("utf-8")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with SHA-256 pre-hashing."""
    prehashed = _prehash_password(password)
    salt = bcrypt_lib.gensalt()
    return bcrypt_lib.hashpw(prehashed.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """
    Verify a password against its hash.

    Accepts both pre-hashed and direct bcrypt hashes; the latter were
    written by the previous web stack. Never raises.
    """
    if not password or not hashed:
        return False

    hashed_bytes = hashed.encode("utf-8")

    prehashed = _prehash_password(password)
    try:
        if bcrypt_lib.checkpw(prehashed.encode("utf-8"), hashed_bytes):
            return True
    except ValueError:
        # Not a bcrypt hash at all
        return False

    try:
        return bcrypt_lib.checkpw(password.encode("utf-8"), hashed_bytes)
    except ValueError:
        # Password too long for direct bcrypt - definitely not a match
        return False


def validate_password(
    password: str,
    min_length: int = 8,
    max_length: int = 128,
    require_uppercase: bool = True,
    require_lowercase: bool = True,
    require_digit: bool = True,
    require_special: bool = False,
    special_chars: str = r"!@#$%^&*(),.?\":{}|<>",
) -> Tuple[bool, List[str]]:
    """
    Validate password strength.

    Args:
        password: The password to validate
        min_length: Minimum password length
        max_length: Maximum password length
        require_uppercase: Require at least one uppercase letter
        require_lowercase: Require at least one lowercase letter
        require_digit: Require at least one digit
        require_special: Require at least one special character
        special_chars: String of allowed special characters

    Returns:
        Tuple of (is_valid: bool, errors: List[str])

    Examples:
        >>> is_valid, errors = validate_password("weak")
        >>> print(is_valid)
        False

        >>> is_valid, errors = validate_password("StrongP@ss123")
        >>> print(is_valid)
        True
    """
    errors: List[str] = []

    if len(password) < min_length:
        errors.append(f"Password must be at least {min_length} characters")

    if len(password) > max_length:
        errors.append(f"Password must be no more than {max_length} characters")

    if require_uppercase and not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if require_lowercase and not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")

    if require_digit and not re.search(r"\d", password):
        errors.append("Password must contain at least one digit")

    if require_special:
        escaped_chars = re.escape(special_chars)
        if not re.search(f"[{escaped_chars}]", password):
            errors.append("Password must contain at least one special character")

    return len(errors) == 0, errors


def check_password(password: str) -> Dict[str, Union[bool, str]]:
    """
    Validate a new password and report the first problem.

    Returns:
        {"valid": bool, "message": str}
    """
    is_valid, errors = validate_password(password)
    if is_valid:
        return {"valid": True, "message": "Password is valid"}
    return {"valid": False, "message": errors[0]}
