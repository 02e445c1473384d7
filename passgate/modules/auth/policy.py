"""Password strength policy.

A password is accepted when it is at least ``MIN_PASSWORD_LENGTH`` characters
long and contains at least one lowercase letter, one uppercase letter, one
digit and one symbol. Every rule is checked, so a weak password reports all of
its problems at once.
"""

MIN_PASSWORD_LENGTH = 8

TOO_SHORT = f"password must be at least {MIN_PASSWORD_LENGTH} characters long"
MISSING_LOWERCASE = "password must contain lowercase letter(s)"
MISSING_UPPERCASE = "password must contain uppercase letter(s)"
MISSING_DIGIT = "password must contain number(s)"
MISSING_SYMBOL = "password must contain symbol(s)"


def validate_password(password: str) -> list[str]:
    """Check a password against the strength policy.

    Each character falls into exactly one class: ASCII lowercase, else ASCII
    uppercase, else ASCII digit, else symbol.

    Args:
        password: Candidate password.

    Returns:
        Violation messages in rule order. Empty if the password is acceptable.
    """
    violations: list[str] = []

    if len(password) < MIN_PASSWORD_LENGTH:
        violations.append(TOO_SHORT)

    lower = upper = digits = symbols = 0
    for char in password:
        if "a" <= char <= "z":
            lower += 1
        elif "A" <= char <= "Z":
            upper += 1
        elif "0" <= char <= "9":
            digits += 1
        else:
            symbols += 1

    if lower == 0:
        violations.append(MISSING_LOWERCASE)
    if upper == 0:
        violations.append(MISSING_UPPERCASE)
    if digits == 0:
        violations.append(MISSING_DIGIT)
    if symbols == 0:
        violations.append(MISSING_SYMBOL)

    return violations
