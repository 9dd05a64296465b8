"""Password hashing and the shared password policy"""
import re
from dataclasses import dataclass
from typing import List, Optional

import bcrypt

DEFAULT_ROUNDS = 12


@dataclass(frozen=True)
class PasswordPolicy:
    """Rules applied to every password a user chooses (onboarding, reset, change)"""

    min_length: int = 8
    special_characters: str = '!@#$%^&*(),.?":{}|<>'

    def violations(self, password: Optional[str]) -> List[str]:
        password = password or ""
        problems = []
        if len(password) < self.min_length:
            problems.append(f"Password must be at least {self.min_length} characters long")
        if not re.search(r"[A-Z]", password):
            problems.append("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", password):
            problems.append("Password must contain at least one lowercase letter")
        if not re.search(r"[0-9]", password):
            problems.append("Password must contain at least one number")
        if not any(ch in self.special_characters for ch in password):
            problems.append("Password must contain at least one special character")
        return problems

    def validate(self, password: Optional[str]) -> str:
        """Return ``password`` unchanged or raise ``ValueError`` with the first violation"""
        problems = self.violations(password)
        if problems:
            raise ValueError(problems[0])
        return password


password_policy = PasswordPolicy()


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False
