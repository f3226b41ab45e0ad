from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from typing import List

from util.dates_utils import iso_now


class Comment(BaseModel):
    postId: ObjectId  # Reference to Posts collection
    author: str
    text: str
    date: str = Field(default_factory=iso_now)
    likeCount: int = 0
    likedBy: List[str] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)


class CommentCreateRequest(BaseModel):
    author: str
    text: str
    postId: str


class CommentUpdateRequest(BaseModel):
    text: str


class LikeRequest(BaseModel):
    userId: str
