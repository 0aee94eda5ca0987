"""Prompt builder for country market insight generation."""

import json

_EXAMPLE_OUTPUT = json.dumps(
    {
        "carriers": [
            {"name": "DHL", "marketShare": 28.5},
            {"name": "UPS", "marketShare": 22.0},
            {"name": "{home_carrier}", "marketShare": 15.0},
        ],
        "fedexSentiment": "Two to three sentences on {home_carrier}'s position in {country}.",
        "salesTips": ["Tip 1", "Tip 2", "Tip 3", "Tip 4", "Tip 5"],
        "emailTemplate": "Subject: ...\n\nDear [Prospect Name],\n\n...\n\nBest regards,\n[Your Name]",
    },
    indent=2,
)

_SYSTEM_INSTRUCTIONS = """\
You are a logistics market analyst covering the parcel and express market.

STRICT RULES:
- Return exactly one JSON object and nothing else.
- Do NOT wrap the JSON in markdown code fences.
- Use real carriers that operate in the country.
"""

_CONTEXT_TEMPLATE = """\
# CONTEXT

- Country: {country}
- Current revenue: EUR {revenue_millions:.2f}M
- Total bookings: {bookings:,}
"""

_REQUIREMENTS_TEMPLATE = """\
# REQUIREMENTS

1. List 5-7 major carriers operating in {country}, local carriers included.
2. Market shares are percentages and MUST total 100.
3. ALWAYS include {home_carrier} with its estimated market share in {country}.
4. "fedexSentiment" is 2-3 sentences on {home_carrier}'s market position,
   perception and competitive standing in {country}.
5. "salesTips" holds exactly 5 actionable tips specific to {country}.
6. "emailTemplate" is a complete prospecting email with a subject line.
"""


class InsightPromptBuilder:
    """Builds the single text prompt sent to every model variant.

    The prompt names the country, its revenue and booking volume, and pins
    the JSON output shape the validator expects.
    """

    def build_prompt(
        self,
        country: str,
        revenue: float,
        bookings: int,
        home_carrier: str = "FedEx",
    ) -> str:
        """Build the insight prompt.

        Args:
            country: Country name as shown on the dashboard.
            revenue: Country revenue in euros.
            bookings: Country booking volume.
            home_carrier: Brand whose position the insight focuses on.

        Returns:
            A fully formatted prompt string ready for the provider.
        """
        example = _EXAMPLE_OUTPUT.replace("{home_carrier}", home_carrier).replace(
            "{country}", country
        )
        context = _CONTEXT_TEMPLATE.format(
            country=country,
            revenue_millions=revenue / 1_000_000,
            bookings=int(bookings),
        )
        requirements = _REQUIREMENTS_TEMPLATE.format(country=country, home_carrier=home_carrier)

        return (
            f"{_SYSTEM_INSTRUCTIONS}\n"
            f"{context}\n"
            f"# OUTPUT SHAPE\n\n"
            f"Your response MUST be a JSON object with this structure:\n\n"
            f"{example}\n\n"
            f"{requirements}\n"
            f"# TASK\n\n"
            f"Analyze the shipping and logistics market in {country} and return "
            f"the JSON object described above."
        )
