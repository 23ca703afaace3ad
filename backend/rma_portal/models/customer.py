import uuid
from typing import Optional

from sqlmodel import Field, SQLModel


class Customer(SQLModel, table=True):
    __tablename__ = "customers"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)
    customer_number: str = Field(unique=True, index=True)
    name: Optional[str] = None
    email: Optional[str] = None
