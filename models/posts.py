from pydantic import BaseModel
from typing import Optional


class Post(BaseModel):
    author: str
    date: str  # display string, e.g. "4h ago"
    title: Optional[str] = None
    text: str
    commentCount: int = 0
