from passlib.context import CryptContext

MAX_BCRYPT_BYTES = 72  # bcrypt ignores anything past this
DEFAULT_ROUNDS = 12


class PasswordHasher:
    """Salted adaptive hashing of user passwords with bcrypt."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        if len(password.encode("utf-8")) > MAX_BCRYPT_BYTES:
            raise ValueError(f"Password must be at most {MAX_BCRYPT_BYTES} bytes")
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        return self._context.verify(password, hashed)
