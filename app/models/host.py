"""Host payout preference model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, LargeBinary, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.database import Base, utcnow


class HostPayoutProfile(Base):
    """Where a host wants to be paid.

    Maintained by the host through the payout settings endpoints.
    """

    __tablename__ = "host_payout_profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    host_id: Mapped[uuid.UUID] = mapped_column(Uuid, unique=True, nullable=False, index=True)

    payout_method: Mapped[str | None] = mapped_column(String(20))  # bank_transfer, upi, wallet
    account_holder_name: Mapped[str | None] = mapped_column(String(200))

    # Bank transfer (account number encrypted)
    bank_name: Mapped[str | None] = mapped_column(String(100))
    account_number_encrypted: Mapped[bytes | None] = mapped_column(LargeBinary)
    ifsc_code: Mapped[str | None] = mapped_column(String(11))

    # UPI / wallet
    upi_id: Mapped[str | None] = mapped_column(String(100))
    wallet_id: Mapped[str | None] = mapped_column(String(100))

    auto_withdraw: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    @property
    def has_bank_details(self) -> bool:
        return bool(self.account_number_encrypted and self.ifsc_code and self.account_holder_name)

    @property
    def has_upi_details(self) -> bool:
        return bool(self.upi_id)
