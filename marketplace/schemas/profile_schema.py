from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel


class UserProfileView(BaseModel):
    """Public profile: email/phone only present when the owner allows it."""
    id: Union[int, str]
    name: str = "Usuario"
    email: Optional[str] = None
    phone: Optional[str] = None
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    show_email: bool = False
    show_phone: bool = False
    join_date: Optional[datetime] = None
    total_publications: int = 0
