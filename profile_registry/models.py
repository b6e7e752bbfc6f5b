from __future__ import annotations

from pydantic import BaseModel, Field

from profile_registry.profile_store import ProfileRecord


class ProfileFields(BaseModel):
    name: str = Field(..., description="Display name; any length, not unique")
    age: int = Field(..., ge=0, description="Non-negative age, no upper bound")
    email: str = Field(..., description="Contact email, stored as given")


class ProfileView(BaseModel):
    identity: str
    name: str
    age: int
    email: str
    registered_at: int
    is_registered: bool

    @classmethod
    def from_record(cls, identity: str, record: ProfileRecord) -> "ProfileView":
        return cls(
            identity=identity,
            name=record.name,
            age=record.age,
            email=record.email,
            registered_at=record.registered_at,
            is_registered=record.is_registered,
        )


class RegistrationStatus(BaseModel):
    identity: str
    is_registered: bool
