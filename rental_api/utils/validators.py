"""
Validation helpers shared by schemas and services.
Password policy, national identity numbers and phone numbers.
"""

import re
from typing import Optional

from rental_api.utils.exceptions import BadRequestError


class ValidationUtils:
    """
    Utility class for common validation operations.
    """

    # At least 8 characters with lower case, upper case, digit and a special character
    PASSWORD_PATTERN = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^\da-zA-Z]).{8,}$')
    PHONE_PATTERN = re.compile(r'^\+?[0-9][0-9\- ]{6,18}$')
    NID_LENGTHS = (10, 17)

    PASSWORD_RULE = (
        "Password must be at least 8 characters long and contain upper case, "
        "lower case, digit and special character"
    )

    @staticmethod
    def is_strong_password(password: Optional[str]) -> bool:
        return bool(password) and ValidationUtils.PASSWORD_PATTERN.match(password) is not None

    @staticmethod
    def validate_password_strength(password: Optional[str]) -> str:
        """
        Enforce the password policy.

        Args:
            password: Plain text password

        Returns:
            The password unchanged

        Raises:
            BadRequestError: If the password does not satisfy the policy
        """
        if not ValidationUtils.is_strong_password(password):
            raise BadRequestError(ValidationUtils.PASSWORD_RULE)
        return password

    @staticmethod
    def is_valid_nid(nid: Optional[str]) -> bool:
        """
        Check a national identity number.

        Numbers are either 10 digits (smart card) or 17 digits (legacy).
        """
        if not nid:
            return False
        nid = nid.strip()
        return nid.isdigit() and len(nid) in ValidationUtils.NID_LENGTHS

    @staticmethod
    def is_valid_phone(phone: Optional[str]) -> bool:
        if not phone:
            return False
        return ValidationUtils.PHONE_PATTERN.match(phone.strip()) is not None
