from pairhub.models.session import SessionRecord
from pairhub.models.user import User

__all__ = ["User", "SessionRecord"]
