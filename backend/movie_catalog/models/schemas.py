"""Pydantic request bodies. Wire format is camelCase, attributes are snake_case."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Catalog ──────────────────────────────────────────────────────

class CatalogEntryIn(CamelModel):
    """A catalog entry as posted by the client. Unknown keys are kept verbatim."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: int
    title: str = Field(min_length=1)
    year: Optional[int] = None
    genre: Optional[str] = None
    rating: Optional[float] = None
    imdb_rating: Optional[float] = None
    description: Optional[str] = None
    image: Optional[str] = None
    runtime: Optional[str] = None
    tags: Optional[list[str]] = None
    imdb_id: Optional[str] = None
    trailer: Optional[str] = None
    plot: Optional[str] = None
    director: Optional[str] = None
    cast: Optional[list[str]] = None
    date_added: Optional[int] = None

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class PosterUpdate(CamelModel):
    image: str


class TrailerUpdate(CamelModel):
    trailer: Optional[str] = None


class ImportRequest(CamelModel):
    imdb_url: str = Field(min_length=1)


# ── Comments & ratings ───────────────────────────────────────────

class CommentIn(CamelModel):
    movie_id: int
    username: str = Field(min_length=1)
    text: str = Field(min_length=1)
    id: Optional[str] = None
    timestamp: Optional[int] = None


class RatingIn(CamelModel):
    movie_id: int
    rating: int
    user_identifier: str = Field(min_length=1)


# ── Accounts ─────────────────────────────────────────────────────

class SignupRequest(CamelModel):
    username: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ProfileUpdate(CamelModel):
    user_id: str = Field(min_length=1)
    email: Optional[str] = None
    password: Optional[str] = None
    profile_picture: Optional[str] = None


class ForgotPasswordRequest(CamelModel):
    email: str = Field(min_length=1)


class ResetPasswordRequest(CamelModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=1)
