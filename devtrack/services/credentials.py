# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""One-way password hashing with bcrypt."""
import bcrypt


class CredentialService:
    def __init__(self, rounds: int = 12):
        self._rounds = rounds

    def hash(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # malformed stored hash
            return False
