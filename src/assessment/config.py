from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class ProductOffer:
    name: str
    description: str
    amount_cents: int
    currency: str = "usd"


@dataclass(frozen=True)
class AssessmentConfig:
    provider: str = "Claude"
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 4096
    offers: Dict[str, ProductOffer] = field(
        default_factory=lambda: {
            "full_report": ProductOffer(
                name="Full Damage Assessment Report",
                description="Detailed cost breakdown, market value comparison, and repair recommendations",
                amount_cents=199,
            ),
            "ebay_upgrade": ProductOffer(
                name="eBay Parts Search Upgrade",
                description="Search eBay for compatible replacement parts with guaranteed fit",
                amount_cents=49,
            ),
        }
    )


# Matched by substring against the lower-cased part name, first hit wins.
PART_BASE_PRICES: tuple[tuple[str, float], ...] = (
    ("bumper", 250.0),
    ("front bumper", 300.0),
    ("rear bumper", 280.0),
    ("hood", 400.0),
    ("fender", 200.0),
    ("door", 350.0),
    ("mirror", 120.0),
    ("headlight", 180.0),
    ("tail light", 150.0),
    ("grille", 100.0),
    ("windshield", 350.0),
    ("quarter panel", 450.0),
    ("rocker panel", 200.0),
    ("radiator", 180.0),
    ("condenser", 150.0),
    ("wheel", 200.0),
    ("rim", 200.0),
    ("tire", 120.0),
)
DEFAULT_PART_PRICE = 150.0

LISTING_CONDITIONS: tuple[tuple[str, float], ...] = (
    ("New", 1.0),
    ("Certified Refurbished", 0.85),
    ("Used - Like New", 0.6),
    ("Used - Good", 0.6),
)
