"""Fluent dynamic QRIS wrapper and plain-text/image file surface."""
from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path

from .errors import err_empty_payload, err_unreadable_source, err_unsupported_destination
from .metadata import QrisMetadata, extract_metadata
from .qris_encoder import ServiceFee, set_price, set_tax
from .renderer import RenderOptions, render_qr_bytes, supported_extensions
from .scanner import decode_qr_bytes

logger = logging.getLogger("qrisdyn.files")

TEXT_EXTENSION = "txt"


def _extension(path: Path) -> str:
    return path.suffix.lower().lstrip(".")


def read_payload_file(file_path: str | Path) -> str:
    """Read a QRIS string from a ``.txt`` file or decode it from an image file."""

    path = Path(file_path)
    try:
        if _extension(path) == TEXT_EXTENSION:
            return path.read_text(encoding="utf-8").strip()
        image_bytes = path.read_bytes()
    except (OSError, UnicodeDecodeError) as exc:
        raise err_unreadable_source(f"Failed to read {path}: {exc}") from exc

    payload = decode_qr_bytes(image_bytes)
    if not payload:
        raise err_unreadable_source(f"QR code not found in {path}")
    logger.info("payload decoded from image", extra={"path": str(path)})
    return payload


def write_payload_file(payload: str, file_path: str | Path, options: RenderOptions | None = None) -> Path:
    """Write a payload as plain text (``.txt``) or as a QR image (``.png``/``.jpg``/``.jpeg``)."""

    path = Path(file_path)
    ext = _extension(path)
    if ext == TEXT_EXTENSION:
        path.write_text(payload, encoding="utf-8")
    elif ext in supported_extensions():
        path.write_bytes(render_qr_bytes(payload, RenderOptions.for_extension(ext, options)))
    else:
        raise err_unsupported_destination(f"Unsupported file extension: {ext or '(none)'}")
    logger.info("payload written", extra={"path": str(path), "kind": ext})
    return path


class QrisDynamic:
    """Mutable holder of one QRIS payload with chaining setters.

    Not safe for concurrent mutation; use one instance per transaction.
    """

    def __init__(self, initial_qris: str):
        if not initial_qris:
            raise err_empty_payload("Initial QRIS string cannot be empty")
        self._qris = initial_qris
        self.price = 0.0
        self.tax_amount = 0.0

    @property
    def payload(self) -> str:
        return self._qris

    def set_price(self, price: int) -> QrisDynamic:
        self._qris = set_price(self._qris, price)
        self.price = float(price)
        return self

    def set_tax(self, tax: int | str) -> QrisDynamic:
        fee = ServiceFee.parse(tax)
        self._qris = set_tax(self._qris, tax)
        if fee.is_percentage:
            self.tax_amount = round(float(Decimal(fee.value)) / 100 * self.price, 2)
        else:
            self.tax_amount = float(fee.value)
        return self

    def metadata(self) -> QrisMetadata:
        return extract_metadata(self._qris)

    def write_to_file(self, file_path: str | Path, options: RenderOptions | None = None) -> Path:
        return write_payload_file(self._qris, file_path, options)

    def __str__(self) -> str:
        return self._qris

    def __repr__(self) -> str:
        return f"QrisDynamic(price={self.price!r}, tax_amount={self.tax_amount!r})"

    @classmethod
    def from_string(cls, static_qris: str) -> QrisDynamic:
        if not static_qris:
            raise err_empty_payload("Static QRIS string cannot be empty")
        return cls(static_qris)

    @classmethod
    def from_file(cls, file_path: str | Path) -> QrisDynamic:
        return cls.from_string(read_payload_file(file_path))
