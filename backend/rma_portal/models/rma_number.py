from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class IssuedRmaNumber(SQLModel, table=True):
    __tablename__ = "rma_numbers"

    rma_number: str = Field(primary_key=True)
    issued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
