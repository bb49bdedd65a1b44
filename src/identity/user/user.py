"""User aggregate: a storefront account that can authenticate and place orders."""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, String

from identity.domain import identity
from identity.user.events import UserRegistered


class Role(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


def _email_problem(email: str) -> bool:
    """True when ``email`` is not a structurally valid address."""
    if any(ch in email for ch in (" ", "\t", "\n")) or email.count("@") != 1:
        return True

    local_part, domain_part = email.split("@", 1)
    if not local_part or local_part.startswith(".") or local_part.endswith("."):
        return True
    if not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
        return True
    if "." not in domain_part or ".." in email:
        return True
    if any(label.startswith("-") or label.endswith("-") for label in domain_part.split(".")):
        return True
    return any(forbidden in email for forbidden in (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\"))


@identity.aggregate
class User:
    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    password_hash: String(required=True, max_length=255)
    role: String(choices=Role, default=Role.CUSTOMER.value)
    created_at: DateTime()

    @invariant.post
    def email_must_be_valid(self):
        if self.email and _email_problem(self.email):
            raise ValidationError({"email": [f"Invalid email address: {self.email!r}"]})

    @classmethod
    def register(cls, name, email, password_hash, role=Role.CUSTOMER.value):
        now = datetime.now(UTC)
        user = cls(
            name=name,
            email=email.strip().lower(),
            password_hash=password_hash,
            role=role,
            created_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=str(user.id),
                email=user.email,
                name=user.name,
                role=user.role,
                registered_at=now,
            )
        )
        return user

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


@identity.repository(part_of=User)
class UserRepository:
    def find_by_email(self, email: str) -> User | None:
        results = self._dao.query.filter(email=email.strip().lower()).all()
        return results.items[0] if results.items else None
