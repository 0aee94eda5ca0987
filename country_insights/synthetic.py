"""Deterministic synthetic insights.

Used when no provider credential is configured or the provider path fails.
Everything is seeded from a hash of the country name, so a country always
gets the same carriers, shares and narrative, while different countries
get different ones.
"""

import logging
from datetime import datetime
from typing import List, Tuple

from country_insights.schema import CarrierInfo, CountryInsights
from country_insights.shares import normalize_to_total, round_shares

logger = logging.getLogger(__name__)

# (name, base share before variance)
_CARRIER_POOL: Tuple[Tuple[str, int], ...] = (
    ("DHL", 30),
    ("UPS", 22),
    ("FedEx", 18),
    ("TNT", 12),
    ("DPD", 10),
    ("GLS", 8),
    ("Aramex", 6),
    ("SF Express", 15),
    ("Japan Post", 20),
    ("Australia Post", 25),
    ("Royal Mail", 18),
    ("La Poste", 16),
    ("Deutsche Post", 22),
)

_MISSING_HOME_SHARE = 12.5

_TIP_SETS: Tuple[Tuple[str, ...], ...] = (
    (
        "Partner with the leading e-commerce marketplaces in {country}",
        "Package pricing tiers aimed at small and mid-sized shippers",
        "Raise visibility in the industrial zones that are growing fastest",
    ),
    (
        "Run campaigns built around international shipping reach",
        "Tailor offers to the main export industries of {country}",
        "Open direct relationships with large retailers and distributors",
    ),
    (
        "Pilot same-day delivery in the largest cities of {country}",
        "Introduce volume-based loyalty pricing for frequent shippers",
        "Localize the mobile shipping experience for {country}",
    ),
    (
        "Team up with local last-mile partners to widen coverage",
        "Promote temperature-controlled logistics for perishables",
        "Build vertical offers for healthcare, automotive and tech",
    ),
    (
        "Host supply chain workshops for key accounts",
        "Offer free shipping audits that quantify savings",
        "Expand warehouse capacity near the main hubs of {country}",
    ),
)


def country_hash(country: str) -> int:
    """Sum of the code points of *country*; stable across runs."""
    return sum(ord(char) for char in country)


def _ordinal(rank: int) -> str:
    if 10 <= rank % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(rank % 10, "th")
    return f"{rank}{suffix}"


class SyntheticInsightGenerator:
    """Builds plausible, non-authoritative insights from the country name.

    Guarantees 5-6 carriers drawn from a fixed pool, the home carrier always
    present, shares totalling exactly 100.0 after rounding, and carriers
    sorted by share, highest first.
    """

    def __init__(self, home_carrier: str = "FedEx") -> None:
        self._home_carrier = home_carrier

    def generate(
        self,
        country: str,
        revenue: float,
        bookings: int,
        *,
        generated_at: datetime,
    ) -> CountryInsights:
        seed = country_hash(country)
        carriers = self._carriers(seed)

        home = next(c for c in carriers if c.is_home_carrier)
        rank = carriers.index(home) + 1
        logger.info(
            "Synthetic insights for %s: %s share=%.1f%% rank=%d",
            country,
            self._home_carrier,
            home.market_share,
            rank,
        )

        return CountryInsights(
            country=country,
            carriers=tuple(carriers),
            sentiment_text=self._sentiment(country, seed, home.market_share, rank),
            sales_tips=self._sales_tips(country, seed, rank),
            email_template=self._email_template(country, revenue, bookings, home.market_share),
            generated_at=generated_at,
        )

    def _carriers(self, seed: int) -> List[CarrierInfo]:
        ranked_pool = sorted(
            _CARRIER_POOL,
            key=lambda item: (ord(item[0][0]) + seed) % 100,
            reverse=True,
        )
        count = 5 + seed % 2
        selected = ranked_pool[:count]
        if all(name != self._home_carrier for name, _ in selected):
            # Leave room for the home carrier so the list stays at 5-6 entries.
            selected = selected[: count - 1]

        names: List[str] = []
        shares: List[float] = []
        for index, (name, base) in enumerate(selected):
            if name == self._home_carrier:
                shares.append(float(max(5, base + (seed % 80) - 40)))
            else:
                shares.append(float(max(3, base + (seed + index * 37) % 30 - 15)))
            names.append(name)

        if self._home_carrier not in names:
            shares = normalize_to_total(shares)
            names.append(self._home_carrier)
            shares.append(_MISSING_HOME_SHARE)

        rounded = round_shares(normalize_to_total(shares))
        carriers = [
            CarrierInfo(name=name, market_share=share, is_home_carrier=name == self._home_carrier)
            for name, share in zip(names, rounded)
        ]
        carriers.sort(key=lambda carrier: carrier.market_share, reverse=True)
        return carriers

    def _sentiment(self, country: str, seed: int, share: float, rank: int) -> str:
        brand = self._home_carrier
        if rank == 1:
            standing = "a leading"
        elif rank <= 3:
            standing = "a strong competitive"
        else:
            standing = "a growing"

        variants = (
            f"{brand} holds {standing} position in {country} with {share:.1f}% market share. "
            f"Its international network and express capabilities set it apart in this market.",
            f"In {country}, {brand} is the #{rank} parcel provider with {share:.1f}% market share. "
            f"Brand recognition and dependable service keep customers loyal, although local "
            f"competitors continue to press on price.",
            f"{brand} serves {share:.1f}% of the shipping market in {country}, ranking "
            f"{_ordinal(rank)} among major carriers. Investment in tracking and digital tools "
            f"has strengthened its competitive position.",
        )
        return variants[seed % len(variants)]

    def _sales_tips(self, country: str, seed: int, rank: int) -> Tuple[str, ...]:
        base_tips = [tip.format(country=country) for tip in _TIP_SETS[seed % len(_TIP_SETS)]]
        standing = "market leadership" if rank <= 3 else "growing presence"
        return tuple(
            base_tips
            + [
                f"Use {self._home_carrier}'s {standing} to win enterprise accounts",
                f"Lead with cross-border shipping expertise as the differentiator in {country}",
            ]
        )

    def _email_template(self, country: str, revenue: float, bookings: int, share: float) -> str:
        brand = self._home_carrier
        return (
            f"Subject: Improve Your Shipping Efficiency in {country} with {brand}\n"
            f"\n"
            f"Dear [Prospect Name],\n"
            f"\n"
            f"I am reaching out to discuss how {brand} can streamline your shipping "
            f"operations in {country}.\n"
            f"\n"
            f"Market insights:\n"
            f"- Current shipping revenue in {country}: EUR {revenue / 1_000_000:.1f}M\n"
            f"- Total shipments: {int(bookings):,}\n"
            f"- {brand} market share: {share:.1f}%\n"
            f"\n"
            f"Why {brand}?\n"
            f"- Global network with reliable international connections\n"
            f"- End-to-end tracking and visibility\n"
            f"- Express options for time-critical shipments\n"
            f"- Dedicated account management\n"
            f"\n"
            f"Businesses like yours in {country} have cut shipping costs while improving "
            f"delivery times. Could we schedule a 15-minute call next week to look at "
            f"your needs?\n"
            f"\n"
            f"Best regards,\n"
            f"[Your Name]\n"
            f"{brand} Sales Team"
        )
