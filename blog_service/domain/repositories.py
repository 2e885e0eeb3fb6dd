"""
Repository interfaces - Define contracts for data access
"""
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple, TypeVar

from .models import Record


USERS = "users"
POSTS = "posts"
COMMENTS = "comments"

R = TypeVar("R")

# A mutation receives the current records and returns (new_records, result)
Mutation = Callable[[List[Record]], Tuple[List[Record], R]]


class IRecordStore(ABC):
    """Ordered collections of flat records, persisted whole"""

    @abstractmethod
    async def load(self, collection: str) -> List[Record]:
        """Load every record of a collection; empty if it was never saved"""
        pass

    @abstractmethod
    async def save(self, collection: str, records: List[Record]) -> None:
        """Replace the whole collection"""
        pass

    @abstractmethod
    async def mutate(self, collection: str, fn: Mutation) -> R:
        """
        Load, transform and save a collection as one serialized step

        Nothing is written if fn raises.
        """
        pass


class IAuthProvider(ABC):
    """Password hashing and access token issuance"""

    @abstractmethod
    def hash_password(self, password: str) -> str:
        """Hash a plain password"""
        pass

    @abstractmethod
    def verify_password(self, password: str, password_hash: str) -> bool:
        """Check a plain password against a stored hash"""
        pass

    @abstractmethod
    def create_access_token(self, user_id: str) -> str:
        """Issue an access token for a user"""
        pass

    @abstractmethod
    def decode_access_token(self, token: str) -> Optional[str]:
        """Return the user id carried by a valid token, None otherwise"""
        pass
