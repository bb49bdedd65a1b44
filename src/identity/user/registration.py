"""User registration: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from identity.auth import hash_password
from identity.domain import identity
from identity.user.user import Role, User


@identity.command(part_of="User")
class RegisterUser:
    """Create a storefront account. The password arrives in clear and is hashed here."""

    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    password: String(required=True, min_length=8, max_length=128)
    role: String(choices=Role, default=Role.CUSTOMER.value)


@identity.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(User)
        if repo.find_by_email(command.email) is not None:
            raise ValidationError({"email": ["An account with this email already exists"]})

        user = User.register(
            name=command.name,
            email=command.email,
            password_hash=hash_password(command.password),
            role=command.role,
        )
        repo.add(user)
        return str(user.id)
