"""Pydantic schemas for API contracts."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr


class GenerateQRRequest(BaseModel):
    # Strict types: booleans and containers fail here and map to ERR_BAD_AMOUNT / ERR_INVALID_ID.
    amount: StrictInt | StrictFloat | StrictStr | None = None
    id: StrictStr | None = Field(default=None, description="Merchant identity ID1..ID6, case-insensitive")


class GenerateQRResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    qr_string: str = Field(alias="qrString")
    md5_hash: str = Field(alias="md5Hash")
    amount: int | float | str
    timestamp: str


class ErrorResponse(BaseModel):
    code: str
    message: str
