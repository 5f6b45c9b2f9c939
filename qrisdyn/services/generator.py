"""Dynamic QRIS issuing services."""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..dynamic import QrisDynamic
from ..metadata import QrisMetadata
from ..models import DynamicCode
from ..monitoring import record_payload_issued
from ..renderer import RenderOptions, render_qr_base64


@dataclass(slots=True)
class IssueResult:
    record: DynamicCode
    metadata: QrisMetadata
    qr_png_base64: str | None


def default_render_options(**overrides) -> RenderOptions:
    cfg = settings.render
    base = {
        "version": cfg.version,
        "error_correction": cfg.error_correction,
        "scale": cfg.scale,
        "quiet_zone": cfg.quiet_zone,
        "label": cfg.label,
    }
    base.update({k: v for k, v in overrides.items() if v is not None})
    return RenderOptions(**base)


class DynamicCodeService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def issue(
        self,
        *,
        static_payload: str,
        amount: int,
        tax: int | str | None = None,
        include_image: bool = False,
    ) -> IssueResult:
        qris = QrisDynamic.from_string(static_payload).set_price(amount)
        if tax is not None:
            qris.set_tax(tax)
        metadata = qris.metadata()

        record = DynamicCode(
            merchant_name=metadata.merchant,
            merchant_pan=metadata.merchant_pan,
            amount=amount,
            tax=None if tax is None else str(tax),
            static_payload=static_payload,
            payload=qris.payload,
            crc=qris.payload[-4:],
        )
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)

        record_payload_issued("none" if tax is None else ("percent" if isinstance(tax, str) else "fixed"))

        qr_png_base64 = None
        if include_image:
            qr_png_base64 = render_qr_base64(qris.payload, default_render_options())

        return IssueResult(record=record, metadata=metadata, qr_png_base64=qr_png_base64)

    async def get(self, code_id: str) -> DynamicCode | None:
        stmt = select(DynamicCode).where(DynamicCode.id == code_id).limit(1)
        result = await self.session.execute(stmt)
        return result.scalars().first()
