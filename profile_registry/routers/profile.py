from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException

from profile_registry.auth import Caller
from profile_registry.deps import get_caller, get_registry
from profile_registry.models import ProfileFields, ProfileView, RegistrationStatus
from profile_registry.registry import AlreadyRegisteredError, NotRegisteredError, ProfileRegistry

router = APIRouter(prefix="/v1", tags=["profile"])


@router.post("/profile/register", response_model=ProfileView, status_code=201)
def register_endpoint(
    payload: ProfileFields = Body(...),
    caller: Caller = Depends(get_caller),
    registry: ProfileRegistry = Depends(get_registry),
) -> ProfileView:
    try:
        registry.register(caller.identity, payload.name, payload.age, payload.email)
    except AlreadyRegisteredError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ProfileView.from_record(caller.identity, registry.get_profile(caller.identity))


@router.put("/profile", response_model=ProfileView)
def update_profile_endpoint(
    payload: ProfileFields = Body(...),
    caller: Caller = Depends(get_caller),
    registry: ProfileRegistry = Depends(get_registry),
) -> ProfileView:
    try:
        registry.update_profile(caller.identity, payload.name, payload.age, payload.email)
    except NotRegisteredError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ProfileView.from_record(caller.identity, registry.get_profile(caller.identity))


@router.get("/profile", response_model=ProfileView)
def get_profile_endpoint(
    caller: Caller = Depends(get_caller),
    registry: ProfileRegistry = Depends(get_registry),
) -> ProfileView:
    """The caller's own profile; the default record if they never registered."""
    return ProfileView.from_record(caller.identity, registry.get_profile(caller.identity))


@router.get("/profile/status/{identity:path}", response_model=RegistrationStatus)
def registration_status_endpoint(
    identity: str,
    registry: ProfileRegistry = Depends(get_registry),
) -> RegistrationStatus:
    return RegistrationStatus(identity=identity, is_registered=registry.check_registration_status(identity))


@router.get("/records/{identity:path}", response_model=ProfileView)
def record_endpoint(
    identity: str,
    registry: ProfileRegistry = Depends(get_registry),
) -> ProfileView:
    # Raw records are public, unlike /profile which only ever serves the caller.
    return ProfileView.from_record(identity, registry.get_record(identity))
