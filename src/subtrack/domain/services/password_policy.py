"""
Password policy.

Decides whether a candidate password is acceptable for a new account or a
password change. Hashing lives in the infrastructure layer.
"""


class PasswordValidator:
    """Password strength validator."""

    MIN_LENGTH = 8
    MAX_LENGTH = 128

    COMMON_PASSWORDS = {
        "password",
        "12345678",
        "123456789",
        "1234567890",
        "qwerty123",
        "qwertyuiop",
        "11111111",
        "abc12345",
        "iloveyou",
        "letmein1",
        "welcome1",
        "admin123",
        "password1",
        "passw0rd",
        "trustno1",
        "baseball",
        "football",
        "sunshine",
    }

    def __init__(self, min_length: int = MIN_LENGTH, max_length: int = MAX_LENGTH) -> None:
        self.min_length = min_length
        self.max_length = max_length

    def validate(self, password: str) -> tuple[bool, list[str]]:
        """
        Validate password strength.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        if len(password) < self.min_length:
            errors.append(f"Password must be at least {self.min_length} characters long")
        if len(password) > self.max_length:
            errors.append(f"Password must not exceed {self.max_length} characters")

        try:
            password.encode("utf-8")
        except UnicodeEncodeError:
            errors.append("Password contains invalid characters")

        if password.lower() in self.COMMON_PASSWORDS:
            errors.append("Password is too common")

        return len(errors) == 0, errors
