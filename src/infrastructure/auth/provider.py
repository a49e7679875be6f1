"""Identity carried by an access token."""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID


@dataclass
class TokenUser:
    """Represents a user extracted from an auth token."""

    id: UUID
    username: str
    email: str
    display_name: Optional[str] = None
