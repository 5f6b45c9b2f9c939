"""Shared error definitions for payload handling and the service layer."""
from __future__ import annotations

import enum
from dataclasses import dataclass


class ErrorKind(str, enum.Enum):
    EMPTY_PAYLOAD = "ERR_EMPTY_PAYLOAD"
    INVALID_AMOUNT = "ERR_INVALID_AMOUNT"
    INVALID_TAX_FORMAT = "ERR_INVALID_TAX_FORMAT"
    INVALID_TAX_VALUE = "ERR_INVALID_TAX_VALUE"
    MISSING_COUNTRY_ANCHOR = "ERR_MISSING_COUNTRY_ANCHOR"
    AMOUNT_NOT_SET = "ERR_AMOUNT_NOT_SET"
    TRUNCATED_PAYLOAD = "ERR_TRUNCATED_PAYLOAD"
    MALFORMED_LENGTH = "ERR_MALFORMED_LENGTH"
    UNREADABLE_SOURCE = "ERR_UNREADABLE_SOURCE"
    UNSUPPORTED_DESTINATION = "ERR_UNSUPPORTED_DESTINATION"


@dataclass(slots=True, eq=False)
class QrisError(Exception):
    kind: ErrorKind
    message: str
    status_code: int = 400

    @property
    def code(self) -> str:
        return self.kind.value

    def __str__(self) -> str:  # noqa: D401 override
        return f"{self.code}: {self.message}"


def err_empty_payload(message: str | None = None) -> QrisError:
    return QrisError(ErrorKind.EMPTY_PAYLOAD, message or "QRIS payload cannot be empty")


def err_invalid_amount(message: str | None = None) -> QrisError:
    return QrisError(ErrorKind.INVALID_AMOUNT, message or "Price must be an integer >= 0", status_code=422)


def err_invalid_tax_format(message: str | None = None) -> QrisError:
    return QrisError(
        ErrorKind.INVALID_TAX_FORMAT,
        message or "Tax must be a number or a percentage string (e.g. '10%')",
        status_code=422,
    )


def err_invalid_tax_value(message: str | None = None) -> QrisError:
    return QrisError(ErrorKind.INVALID_TAX_VALUE, message or "Tax must be >= 0", status_code=422)


def err_missing_country_anchor(message: str | None = None) -> QrisError:
    return QrisError(
        ErrorKind.MISSING_COUNTRY_ANCHOR,
        message or "Invalid QRIS format (expected exactly one 5802ID)",
        status_code=422,
    )


def err_amount_not_set(message: str | None = None) -> QrisError:
    return QrisError(
        ErrorKind.AMOUNT_NOT_SET,
        message or "QRIS does not contain a transaction amount (tag 54), set the price first",
        status_code=409,
    )


def err_truncated_payload(message: str | None = None) -> QrisError:
    return QrisError(ErrorKind.TRUNCATED_PAYLOAD, message or "TLV payload is truncated", status_code=422)


def err_malformed_length(message: str | None = None) -> QrisError:
    return QrisError(ErrorKind.MALFORMED_LENGTH, message or "TLV length field is not numeric", status_code=422)


def err_unreadable_source(message: str | None = None) -> QrisError:
    return QrisError(ErrorKind.UNREADABLE_SOURCE, message or "QRIS source could not be read")


def err_unsupported_destination(message: str | None = None) -> QrisError:
    return QrisError(ErrorKind.UNSUPPORTED_DESTINATION, message or "Unsupported output file extension")
