"""Password hashing for directory users."""

from passlib.context import CryptContext

# Cost factor for new hashes; hashes made with another cost still verify
BCRYPT_ROUNDS = 12

password_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS
)


class HashingService:
    """bcrypt hashing of the passwords users sign in with.

    Both calls are CPU bound, async callers run them in a worker thread.
    """

    @staticmethod
    def hash_password(password: str) -> str:
        return password_context.hash(password)

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        """Check a plain password against a stored hash.

        A stored value that is not a bcrypt hash never matches.
        """
        try:
            return password_context.verify(password, password_hash)
        except (ValueError, TypeError):
            return False
