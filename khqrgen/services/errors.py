"""Shared service error definitions."""
from __future__ import annotations

from dataclasses import dataclass

from ..models import MerchantIdentity


@dataclass(slots=True)
class ServiceError(Exception):
    code: str
    message: str
    status_code: int = 400

    def __str__(self) -> str:  # noqa: D401 override
        return f"{self.code}: {self.message}"


def err_bad_amount(message: str | None = None) -> ServiceError:
    return ServiceError(code="ERR_BAD_AMOUNT", message=message or "Valid amount is required", status_code=400)


def err_invalid_id(message: str | None = None) -> ServiceError:
    default = f"Invalid ID. Use one of: {', '.join(MerchantIdentity.choices())}"
    return ServiceError(code="ERR_INVALID_ID", message=message or default, status_code=400)


def err_not_found(identity: MerchantIdentity) -> ServiceError:
    return ServiceError(
        code="ERR_NOT_FOUND",
        message=f"No QR code has been generated for {identity.value} yet.",
        status_code=404,
    )


def err_bad_payload(message: str | None = None) -> ServiceError:
    return ServiceError(code="ERR_BAD_PAYLOAD", message=message or "Invalid request payload", status_code=400)
