from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from waitlist_service.core.deps import get_waitlist_options, get_waitlist_service
from waitlist_service.core.options import WaitlistOptions
from waitlist_service.schemas.waitlist import (
    WaitlistJoinRead,
    WaitlistStatusRead,
    build_join_model,
)
from waitlist_service.services.waitlist import WaitlistService

router = APIRouter(prefix="/waitlist", tags=["waitlist"])


@router.post("", response_model=WaitlistJoinRead, status_code=status.HTTP_201_CREATED)
async def join_waitlist(
    body: dict[str, Any] = Body(...),
    options: WaitlistOptions = Depends(get_waitlist_options),
    service: WaitlistService = Depends(get_waitlist_service),
):
    # The body shape depends on the configured extension fields, so it is
    # validated here against the generated model instead of in the signature.
    join_model = build_join_model(options.additional_fields)
    try:
        payload = join_model.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(
            [
                {**err, "loc": ("body", *err["loc"])}
                for err in exc.errors(include_url=False, include_context=False)
            ]
        )

    fields = payload.model_dump(mode="json", exclude={"email"}, exclude_none=True)
    entry = await service.join(payload.email, fields)
    return WaitlistJoinRead(
        id=entry.id,
        email=entry.email,
        status=entry.status,
        requested_at=entry.requested_at,
        **entry.extra,
    )


@router.get("/status", response_model=WaitlistStatusRead)
async def check_waitlist_status(
    email: str = Query(..., min_length=3),
    service: WaitlistService = Depends(get_waitlist_service),
):
    return await service.check_status(email)
