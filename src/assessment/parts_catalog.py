from __future__ import annotations

import random
import zlib
from typing import Any
from urllib.parse import quote, quote_plus

from pydantic import Field

from assessment.config import DEFAULT_PART_PRICE, LISTING_CONDITIONS, PART_BASE_PRICES
from assessment.data_models import CamelModel, VehicleHint


class Seller(CamelModel):
    username: str
    feedback_score: int
    feedback_percentage: float


class PartListing(CamelModel):
    item_id: str
    title: str
    price: float
    currency: str = "USD"
    condition: str
    image_url: str
    item_url: str
    seller: Seller
    shipping_cost: float = 0.0
    guaranteed_fit: bool = False
    compatibility: str | None = None


class PartSearchResult(CamelModel):
    part_name: str
    search_query: str
    results: list[PartListing] = Field(default_factory=list)
    total_results: int = 0


def base_price(part_name: str) -> float:
    lowered = part_name.lower()
    for keyword, price in PART_BASE_PRICES:
        if keyword in lowered:
            return price
    return DEFAULT_PART_PRICE


def describe_vehicle(vehicle: VehicleHint | None) -> str:
    if vehicle is None:
        return ""
    parts = [str(vehicle.year) if vehicle.year else "", vehicle.make or "", vehicle.model or ""]
    return " ".join(p for p in parts if p)


def build_search_query(part_name: str, vehicle: VehicleHint | None) -> str:
    return " ".join(p for p in (part_name, describe_vehicle(vehicle)) if p)


def mock_search(part_name: str, vehicle: VehicleHint | None = None, count: int = 5) -> PartSearchResult:
    """Marketplace stand-in: plausible listings, reproducible for a given query."""
    query = build_search_query(part_name, vehicle)
    vehicle_desc = describe_vehicle(vehicle)
    rng = random.Random(query.lower())
    price_base = base_price(part_name)

    listings: list[dict[str, Any]] = []
    for i in range(count):
        condition, multiplier = LISTING_CONDITIONS[i % len(LISTING_CONDITIONS)]
        price = round(price_base * multiplier * (0.9 + rng.random() * 0.3))
        listings.append({
            "item_id": f"ebay-{zlib.crc32(query.encode()):08x}-{i}",
            "title": f"{condition} {part_name}{f' for {vehicle_desc}' if vehicle_desc else ''} - OEM Quality",
            "price": float(price),
            "condition": condition,
            "image_url": f"https://placehold.co/200x200/e2e8f0/64748b?text={quote(part_name[:10])}",
            "item_url": f"https://www.ebay.com/sch/i.html?_nkw={quote_plus(query)}",
            "seller": {
                "username": f"autoparts_seller_{i + 1}",
                "feedback_score": int(1000 + rng.random() * 50000),
                "feedback_percentage": round(95 + rng.random() * 4.9, 1),
            },
            "shipping_cost": float(round(10 + rng.random() * 30)) if rng.random() > 0.3 else 0.0,
            "guaranteed_fit": rng.random() > 0.3,
            "compatibility": vehicle_desc or None,
        })

    results = sorted((PartListing.model_validate(item) for item in listings), key=lambda item: item.price)
    return PartSearchResult(
        part_name=part_name,
        search_query=query,
        results=results,
        total_results=len(results) + rng.randint(0, 99),
    )
