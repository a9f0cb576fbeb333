from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal, TypeAlias

RoleName: TypeAlias = Literal["admin", "editor", "viewer"]


class RegisterRequest(BaseModel):
    """Credentials for a new account"""

    email: str = Field(min_length=3, description="Login email address")
    password: str = Field(min_length=1)
    role: RoleName = "editor"


class LoginRequest(BaseModel):
    """Credentials exchanged for a bearer token"""

    email: str
    password: str


class DocumentCreateRequest(BaseModel):
    """A plain-text document submitted by an editor"""

    title: str = ""
    date: str = ""
    text: str = ""


class SearchRequest(BaseModel):
    """Semantic search query with pagination"""

    query: str | None = None
    page: int = Field(default=1, description="1-based page number")
    limit: int = Field(default=10, description="Page size, 1 to 100")


class DocumentSummary(BaseModel):
    """Listing entry for the archive browser"""

    id: str
    title: str
    date: str
    created_at: datetime


class DocumentPage(BaseModel):
    """One page of the newest-first document listing"""

    page: int
    limit: int
    total: int
    items: list[DocumentSummary]
