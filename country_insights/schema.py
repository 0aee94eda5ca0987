"""Structured schemas for country market insights."""

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CarrierInfo(BaseModel):
    """One carrier and its share of a country's parcel market."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    market_share: float = Field(ge=0.0, le=100.0)
    is_home_carrier: bool = False


class CountryInsights(BaseModel):
    """Insight bundle shown for one country.

    Instances are immutable; a cached instance is served unchanged for the
    rest of the session.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    country: str = Field(min_length=1)
    carriers: Tuple[CarrierInfo, ...]
    sentiment_text: str
    sales_tips: Tuple[str, ...]
    email_template: str
    generated_at: datetime

    @property
    def home_carrier(self) -> Optional[CarrierInfo]:
        return next((c for c in self.carriers if c.is_home_carrier), None)


class ProviderCarrier(BaseModel):
    """Carrier entry as returned by the generative provider."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str = Field(min_length=1)
    market_share: float = Field(
        ge=0.0,
        le=100.0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("marketShare", "market_share"),
    )


class ProviderInsightPayload(BaseModel):
    """Raw JSON object the provider is instructed to return.

    The sentiment field is requested as ``fedexSentiment``; ``sentimentText``
    is accepted as well.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    carriers: List[ProviderCarrier]
    sentiment_text: str = Field(
        min_length=1,
        validation_alias=AliasChoices("fedexSentiment", "sentimentText", "sentiment_text"),
    )
    sales_tips: List[str] = Field(
        validation_alias=AliasChoices("salesTips", "sales_tips"),
    )
    email_template: str = Field(
        min_length=1,
        validation_alias=AliasChoices("emailTemplate", "email_template"),
    )
