from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Dropped from the serialized webhook when unset; every other nullable field
# is written out as null.
OMITTED_WHEN_ABSENT = ("convert", "txid", "sign")


class WebhookType(str, Enum):
    PAYMENT = "payment"
    PAYOUT = "payout"


class WebhookConvert(BaseModel):
    model_config = ConfigDict(extra="ignore")

    to_currency: str = ""
    commission: str = ""
    rate: str = ""
    amount: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Webhook(BaseModel):
    """
    Payment or payout status notification pushed by Cryptomus.

    Field order matters: the vendor signs the JSON form of the notification
    and the signature can only be reproduced by serializing the fields in the
    order declared here.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str = ""
    uuid: str = ""
    order_id: str = ""
    amount: str = ""
    payment_amount: Optional[str] = None
    payment_amount_usd: str = ""
    merchant_amount: Optional[str] = None
    commission: Optional[str] = None
    is_final: bool = False
    status: str = ""
    from_: Optional[str] = Field(None, alias="from")
    wallet_address_uuid: Optional[str] = None
    network: Optional[str] = None
    currency: str = ""
    payer_currency: Optional[str] = None
    payer_amount: Optional[str] = None
    payer_amount_exchange_rate: Optional[str] = None
    additional_data: Optional[str] = None
    convert: Optional[WebhookConvert] = None
    transfer_id: Optional[str] = None
    txid: Optional[str] = None
    sign: Optional[str] = None

    @field_validator(
        "type",
        "uuid",
        "order_id",
        "amount",
        "payment_amount_usd",
        "status",
        "currency",
        mode="before",
    )
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("is_final", mode="before")
    @classmethod
    def _null_as_false(cls, value: Any) -> Any:
        return False if value is None else value

    def to_signed_dict(self) -> dict[str, Any]:
        """Return the notification as the vendor signs it, without ``sign``."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"sign"})
        for key in OMITTED_WHEN_ABSENT:
            if key in data and data[key] is None:
                del data[key]
        return data


def _without_empty(data: dict[str, Any], *keys: str) -> dict[str, Any]:
    for key in keys:
        if not data.get(key):
            data.pop(key, None)
    return data


class ResendWebhookRequest(BaseModel):
    uuid: Optional[str] = None
    order_id: Optional[str] = None

    def has_identifier(self) -> bool:
        return bool(self.uuid or self.order_id)

    def payload(self) -> dict[str, Any]:
        return _without_empty(self.model_dump(), "uuid", "order_id")


class ResendWebhookResponse(BaseModel):
    result: list[str] = Field(default_factory=list)
    state: int = 0

    @property
    def succeeded(self) -> bool:
        return len(self.result) == 0


class TestWebhookRequest(BaseModel):
    __test__ = False  # not a pytest test class

    url_callback: str
    currency: str
    network: str
    uuid: Optional[str] = None
    order_id: Optional[str] = None
    status: str

    def payload(self) -> dict[str, Any]:
        return _without_empty(self.model_dump(), "uuid", "order_id")


class TestWebhookResponse(BaseModel):
    __test__ = False

    result: list[str] = Field(default_factory=list)
    state: int = 0
