"""Pydantic v2 schemas for Explorer reviews."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fixia.models.review import SUB_RATING_FIELDS


def _unrated_to_none(v: object) -> object:
    # The review form sends 0 for sub-ratings the Explorer left empty
    if v == 0:
        return None
    return v


def _validate_photos(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    for url in v:
        if not url.strip():
            raise ValueError("Photo URL must not be empty")
        if len(url) > 2048:
            raise ValueError("Photo URL must be <= 2048 chars")
    return v


class ReviewCreate(BaseModel):
    connection_id: uuid.UUID
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., max_length=4096)
    service_quality_rating: int | None = Field(None, ge=1, le=5)
    punctuality_rating: int | None = Field(None, ge=1, le=5)
    communication_rating: int | None = Field(None, ge=1, le=5)
    value_for_money_rating: int | None = Field(None, ge=1, le=5)
    would_hire_again: bool = True
    recommend_to_others: bool = True
    review_photos: list[str] = Field(default_factory=list, max_length=10)

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment is required")
        return v

    @field_validator(*SUB_RATING_FIELDS, mode="before")
    @classmethod
    def unrated_sub_rating(cls, v: object) -> object:
        return _unrated_to_none(v)

    @field_validator("review_photos")
    @classmethod
    def validate_photos(cls, v: list[str]) -> list[str]:
        return _validate_photos(v) or []


class ReviewUpdate(BaseModel):
    rating: int | None = Field(None, ge=1, le=5)
    comment: str | None = Field(None, max_length=4096)
    service_quality_rating: int | None = Field(None, ge=1, le=5)
    punctuality_rating: int | None = Field(None, ge=1, le=5)
    communication_rating: int | None = Field(None, ge=1, le=5)
    value_for_money_rating: int | None = Field(None, ge=1, le=5)
    would_hire_again: bool | None = None
    recommend_to_others: bool | None = None

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Comment must not be empty")
        return v

    @field_validator(*SUB_RATING_FIELDS, mode="before")
    @classmethod
    def unrated_sub_rating(cls, v: object) -> object:
        return _unrated_to_none(v)


class ReviewSubmitResponse(BaseModel):
    success: bool = True
    message: str = "Review submitted successfully"
    review_id: uuid.UUID


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    review_id: uuid.UUID
    connection_id: uuid.UUID
    explorer_id: uuid.UUID
    as_id: uuid.UUID
    rating: int
    comment: str
    service_quality_rating: int | None = None
    punctuality_rating: int | None = None
    communication_rating: int | None = None
    value_for_money_rating: int | None = None
    would_hire_again: bool
    recommend_to_others: bool
    review_photos: list[str] = []
    is_verified_review: bool
    created_at: datetime
    updated_at: datetime


ReviewSort = Literal["recent", "rating_high", "rating_low"]


class ReviewStatistics(BaseModel):
    total_reviews: int
    avg_rating: float | None = None
    avg_service_quality: float | None = None
    avg_punctuality: float | None = None
    avg_communication: float | None = None
    avg_value_for_money: float | None = None
    would_hire_again_count: int
    recommend_count: int


class Pagination(BaseModel):
    limit: int
    offset: int
    has_more: bool


class ProfessionalReviewsResponse(BaseModel):
    reviews: list[ReviewResponse]
    statistics: ReviewStatistics
    pagination: Pagination
