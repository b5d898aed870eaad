"""Payout endpoints for hosts."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_host, get_db
from app.core.encryption import decrypt_account_number, mask_account_number
from app.core.exceptions import NotFoundError
from app.core.security import Actor
from app.models.host import HostPayoutProfile
from app.models.payout import PayoutRecord
from app.schemas.payout import (
    HostPayoutSummaryResponse,
    PayoutListResponse,
    PayoutResponse,
    PayoutSettingsResponse,
    PayoutSettingsUpdate,
)
from app.services.payout_service import payout_service

router = APIRouter()


def _settings_response(profile: HostPayoutProfile | None) -> PayoutSettingsResponse:
    if profile is None:
        return PayoutSettingsResponse(
            payout_method=None,
            account_holder_name=None,
            bank_name=None,
            account_number_masked=None,
            ifsc_code=None,
            upi_id=None,
            wallet_id=None,
            auto_withdraw=False,
        )

    masked = None
    if profile.account_number_encrypted:
        masked = mask_account_number(decrypt_account_number(profile.account_number_encrypted))

    return PayoutSettingsResponse(
        payout_method=profile.payout_method,
        account_holder_name=profile.account_holder_name,
        bank_name=profile.bank_name,
        account_number_masked=masked,
        ifsc_code=profile.ifsc_code,
        upi_id=profile.upi_id,
        wallet_id=profile.wallet_id,
        auto_withdraw=bool(profile.auto_withdraw),
    )


@router.get("/", response_model=PayoutListResponse)
async def get_my_payouts(
    current_user: Annotated[Actor, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> PayoutListResponse:
    """Get host's payout history."""
    payouts, total, total_amount = await payout_service.list_payouts(
        db,
        status=status_filter,
        host_id=current_user.id,
        page=page,
        page_size=page_size,
    )
    return PayoutListResponse(
        payouts=[PayoutResponse.model_validate(p) for p in payouts],
        total=total,
        total_amount=total_amount,
        page=page,
        page_size=page_size,
    )


@router.get("/summary", response_model=HostPayoutSummaryResponse)
async def get_my_payout_summary(
    current_user: Annotated[Actor, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Get host's payout totals and monthly breakdown."""
    return await payout_service.host_payout_summary(db, current_user.id)


@router.get("/settings", response_model=PayoutSettingsResponse)
async def get_payout_settings(
    current_user: Annotated[Actor, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PayoutSettingsResponse:
    """Get host's payout settings."""
    profile = await payout_service.get_payout_profile(db, current_user.id)
    return _settings_response(profile)


@router.put("/settings", response_model=PayoutSettingsResponse)
async def update_payout_settings(
    data: PayoutSettingsUpdate,
    current_user: Annotated[Actor, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PayoutSettingsResponse:
    """Update host's payout settings."""
    profile = await payout_service.update_payout_profile(
        db,
        current_user.id,
        data.model_dump(exclude_unset=True),
        actor_id=current_user.id,
    )
    return _settings_response(profile)


@router.get("/{payout_id}", response_model=PayoutResponse)
async def get_payout(
    payout_id: UUID,
    current_user: Annotated[Actor, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PayoutRecord:
    """Get a specific payout."""
    payout = await payout_service.get_payout(db, payout_id)
    if payout.host_id != current_user.id:
        raise NotFoundError("Payout", str(payout_id))
    return payout
