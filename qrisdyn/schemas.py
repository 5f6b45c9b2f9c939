"""Pydantic schemas for API contracts."""
from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from .metadata import QrisMetadata

# Kept well inside the 64-bit INTEGER column of DynamicCode.amount.
MAX_AMOUNT = 999_999_999_999_999


class MetadataRequest(BaseModel):
    payload: str = Field(min_length=1, description="QRIS payload string")


class MetadataResponse(BaseModel):
    merchant: str
    company: str
    region: str
    country: str
    postal_code: str
    merchant_pan: str
    price: str | None = None
    tax: str | None = None
    tax_value: str | None = None
    is_dynamic: bool = False

    @classmethod
    def from_metadata(cls, metadata: QrisMetadata) -> MetadataResponse:
        return cls(**metadata.to_dict())


class DynamicQRRequest(BaseModel):
    payload: str = Field(min_length=1, description="Static QRIS payload string")
    amount: int = Field(ge=0, le=MAX_AMOUNT)
    tax: int | str | None = Field(default=None, description="Nominal fee or percentage such as '10%'")
    include_image: bool = False


class DynamicQRResponse(BaseModel):
    id: UUID
    payload: str
    crc: str
    metadata: MetadataResponse
    qr_png_base64: str | None = None


class DynamicCodeResponse(BaseModel):
    id: UUID
    merchant_name: str
    merchant_pan: str
    amount: int
    tax: str | None
    payload: str
    crc: str
    created_at: datetime


class ScanRequest(BaseModel):
    image_base64: str = Field(min_length=1)


class ScanResponse(BaseModel):
    payload: str
    crc_valid: bool
    metadata: MetadataResponse


class RenderRequest(BaseModel):
    payload: str = Field(min_length=1)
    image_format: Literal["PNG", "JPEG"] = "PNG"
    version: int | None = Field(default=None, ge=1, le=40)
    error_correction: Literal["L", "M", "Q", "H"] | None = None
    scale: int | None = Field(default=None, ge=1, le=50)
    quiet_zone: bool | None = None
    label: str | None = Field(default=None, max_length=32)
