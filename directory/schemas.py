"""
Pydantic models for directory query parameters and directory payload decoding.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from directory.models import Chamber, DirectoryEntry, DirectoryFilter, Party
from utils.errors import DecodeFailure


class DirectoryQueryParams(BaseModel):
    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    state: Optional[str] = Field(default=None, min_length=2, max_length=2)
    chamber: Optional[Chamber] = None
    party: Optional[Party] = None
    search: Optional[str] = Field(default=None, max_length=200)

    @field_validator("state", mode="before")
    @classmethod
    def _upper_state(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value.upper() or None
        return value

    @field_validator("search", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_filter(self) -> DirectoryFilter:
        return DirectoryFilter(state=self.state, chamber=self.chamber, party=self.party, search=self.search)


class DirectoryEntrySchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    external_id: str = Field(alias="externalId", min_length=1)
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    chamber: Chamber
    state: str
    party: Party
    district: Optional[str] = None
    years_in_office: int = Field(default=0, alias="yearsInOffice")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    website_url: Optional[str] = Field(default=None, alias="websiteUrl")
    office_address: Optional[str] = Field(default=None, alias="officeAddress")
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")
    bio: Optional[str] = None
    linked_user_id: Optional[str] = Field(default=None, alias="linkedUserId")

    def to_entry(self) -> DirectoryEntry:
        return DirectoryEntry(**self.model_dump())


class DirectoryListingSchema(BaseModel):
    legislators: List[DirectoryEntrySchema]
    total: int = Field(ge=0)
    limit: int = Field(ge=1)
    offset: int = Field(ge=0)
    has_more: bool = Field(alias="hasMore")


def decode_entry(payload: Any) -> DirectoryEntry:
    try:
        return DirectoryEntrySchema.model_validate(payload).to_entry()
    except ValidationError as exc:
        raise DecodeFailure(f"directory entry did not match the expected shape: {exc.error_count()} error(s)") from exc


def decode_entries(payload: Any) -> List[DirectoryEntry]:
    if not isinstance(payload, list):
        raise DecodeFailure(f"expected a list of directory entries, got {type(payload).__name__}")
    return [decode_entry(item) for item in payload]


def decode_listing(payload: Dict[str, Any]) -> DirectoryListingSchema:
    try:
        return DirectoryListingSchema.model_validate(payload)
    except ValidationError as exc:
        raise DecodeFailure(f"directory listing did not match the expected shape: {exc.error_count()} error(s)") from exc
