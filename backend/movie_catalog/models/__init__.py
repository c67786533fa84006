"""Re-export models for import convenience."""

from movie_catalog.models.tables import KeyValue  # noqa: F401
from movie_catalog.models.schemas import (  # noqa: F401
    CatalogEntryIn, PosterUpdate, TrailerUpdate, ImportRequest,
    CommentIn, RatingIn,
    SignupRequest, LoginRequest, ProfileUpdate,
    ForgotPasswordRequest, ResetPasswordRequest,
)
