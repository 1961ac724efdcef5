from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .util.money import money_to_cents


class _WireModel(BaseModel):
    # The web API speaks camelCase and adds fields without notice; ignore what we don't map.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Identity(_WireModel):
    external_id: str
    username: str = ""
    display_name: str = ""
    identity_type: str = "personal"
    identity_sub_type: Optional[str] = None
    # The API reports the balance in cents.
    balance_cents: int = Field(default=0, alias="balance")
    number_of_notifications: int = 0
    initials: str = ""
    picture_url: Optional[str] = None
    profile_background_picture_url: Optional[str] = None


class StoryParty(_WireModel):
    id: str = ""
    display_name: str = ""
    username: str = ""


class StoryPayload(_WireModel):
    action: str = ""
    sub_type: str = ""


class StoryTitle(_WireModel):
    title_type: str = ""
    payload: Optional[StoryPayload] = None
    receiver: Optional[StoryParty] = None
    sender: Optional[StoryParty] = None


class StoryNote(_WireModel):
    type: Optional[str] = None
    content: Optional[str] = None
    name: Optional[str] = None
    last_four: Optional[str] = None
    date: Optional[str] = None


class InteractionCount(_WireModel):
    count: int = 0
    user_commented_or_liked: bool = False


class Story(_WireModel):
    id: str
    # Display string, e.g. "- $12.34" or "+ $5.00".
    amount: str = ""
    date: Optional[datetime] = None
    type: str = ""
    sub_type: str = ""
    audience: str = ""
    payment_id: Optional[str] = None
    note: Optional[StoryNote] = None
    title: Optional[StoryTitle] = None
    avatar: Optional[str] = None
    initials: str = ""
    attachments: list[Any] = Field(default_factory=list)
    likes: Optional[InteractionCount] = None
    comments: Optional[InteractionCount] = None

    @property
    def amount_cents(self) -> Optional[int]:
        """
        Signed amount in cents parsed from the display string (None when it can't be parsed).
        """
        try:
            return money_to_cents(self.amount)
        except (ValueError, ArithmeticError):
            return None


class StoriesPage(_WireModel):
    # Cursor for the next (older) page; None/empty when the feed is exhausted.
    next_id: Optional[str] = None
    stories: list[Story] = Field(default_factory=list)


class Fee(_WireModel):
    fee_type: Optional[str] = None
    fixed_amount: Optional[float] = None
    variable_percentage: Optional[float] = None


class EligibilityResult(_WireModel):
    eligible: bool = False
    # Single-use, bound server-side to the exact (target, amount, action, note) that produced it.
    eligibility_token: str = ""
    fees: list[Fee] = Field(default_factory=list)


class FundingRoles(_WireModel):
    merchant_payments: Optional[str] = None
    peer_payments: Optional[str] = None


class AvailableBalance(_WireModel):
    value: Optional[float] = None
    display_string: Optional[str] = None


class FundingMetadata(_WireModel):
    available_balance: Optional[AvailableBalance] = None
    bank_name: Optional[str] = None
    is_verified: Optional[bool] = None
    last_four_digits: Optional[str] = None
    issuer_name: Optional[str] = None
    network_name: Optional[str] = None
    is_venmo_card: Optional[bool] = None
    expiration_date: Optional[str] = None


class FundingInstrument(_WireModel):
    # Pass this as the payment's funding source.
    id: str
    instrument_type: str = ""
    name: str = ""
    fees: list[Fee] = Field(default_factory=list)
    metadata: Optional[FundingMetadata] = None
    roles: FundingRoles = Field(default_factory=FundingRoles)


PaymentKind = Literal["peer", "merchant"]


class FundingInstruments(_WireModel):
    capabilities: list[str] = Field(default_factory=list)
    wallet: list[FundingInstrument] = Field(default_factory=list)

    @classmethod
    def from_graphql(cls, data: dict[str, Any]) -> "FundingInstruments":
        profile = (data or {}).get("profile") or {}
        identity = profile.get("identity") or {}
        return cls.model_validate(
            {
                "capabilities": identity.get("capabilities") or [],
                "wallet": profile.get("wallet") or [],
            }
        )

    def balance(self) -> Optional[FundingInstrument]:
        return next((w for w in self.wallet if w.instrument_type == "balance"), None)

    def default_for(self, kind: PaymentKind = "peer") -> Optional[FundingInstrument]:
        """
        The wallet entry whose role for `kind` payments is "default", if any.
        """
        for w in self.wallet:
            role = w.roles.peer_payments if kind == "peer" else w.roles.merchant_payments
            if (role or "").lower() == "default":
                return w
        return None

    def get(self, instrument_id: str) -> Optional[FundingInstrument]:
        return next((w for w in self.wallet if w.id == instrument_id), None)


class PersonAvatar(_WireModel):
    url: Optional[str] = None


class Person(_WireModel):
    id: str
    display_name: str = ""
    type: str = "personal"
    handle: str = ""
    first_name: str = ""
    last_name: str = ""
    is_friend: bool = False
    avatar: Optional[PersonAvatar] = None


class PaymentRequest(BaseModel):
    """
    A payment (`pay`) or charge request (`request`).

    `target_user_id` comes from a person search, `funding_source_id` from the funding instruments query and
    `eligibility_token` from an eligibility check made with the same target/amount/type/note.
    """

    target_user_id: str
    amount_in_cents: int = Field(gt=0)
    note: str
    type: Literal["pay", "request"] = "pay"
    audience: Literal["private", "friends", "public"] = "private"
    funding_source_id: str
    eligibility_token: str

    @field_validator("target_user_id", "funding_source_id", "eligibility_token")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not (v or "").strip():
            raise ValueError("must not be empty")
        return v.strip()

    def to_payload(self) -> dict[str, Any]:
        return {
            "targetUserDetails": {"userId": self.target_user_id},
            "amountInCents": self.amount_in_cents,
            "audience": self.audience,
            "note": self.note,
            "type": self.type,
            "fundingSourceID": self.funding_source_id,
            "eligibilityToken": self.eligibility_token,
        }
