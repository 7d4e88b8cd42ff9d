"""Factory for User models."""

import factory
from src.database.models import User, UserRole
from src.utils.hashing import HashingService
from .base import AsyncSQLAlchemyModelFactory, UUIDFactory

TEST_PASSWORD = "correct-horse-battery"

# bcrypt is slow on purpose, hash once for every factory user
TEST_PASSWORD_HASH = HashingService.hash_password(TEST_PASSWORD)


class UserFactory(AsyncSQLAlchemyModelFactory[User]):
    """Factory for creating User instances."""

    class Meta:
        model = User

    id = UUIDFactory()
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password_hash = TEST_PASSWORD_HASH
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    phone = None
    role = UserRole.PICKER
