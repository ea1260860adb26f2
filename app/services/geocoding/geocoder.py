"""
Nominatim geocoding for Vietnamese street addresses.

Three query strategies are tried in order (structured, district viewbox,
free text); the best candidate favours results that carry a house number.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import httpx

from app.core.config import settings
from app.core.errors import GeocodingFailure

logger = logging.getLogger("contracts.geocoding")

# minlon,minlat,maxlon,maxlat
HCMC_VIEWBOXES = {
    "1": "106.690,10.760,106.710,10.785",
    "3": "106.665,10.765,106.695,10.795",
    "4": "106.695,10.745,106.720,10.770",
    "5": "106.655,10.745,106.685,10.770",
    "10": "106.655,10.765,106.685,10.795",
    "Bình Thạnh": "106.690,10.790,106.730,10.830",
    "Phú Nhuận": "106.670,10.790,106.705,10.820",
    "Tân Bình": "106.620,10.775,106.670,10.825",
}
HCMC_BOX = "106.60,10.70,106.80,10.85"

CITY_ALIASES = [
    (("Hồ Chí Minh", "TP.HCM", "TPHCM", "Sài Gòn", "Saigon"), "Ho Chi Minh City"),
    (("Hà Nội", "Hanoi"), "Hanoi"),
    (("Đà Nẵng", "Da Nang"), "Da Nang"),
    (("Cần Thơ", "Can Tho"), "Can Tho"),
    (("Hải Phòng", "Hai Phong"), "Hai Phong"),
]


@dataclass
class AddressParts:
    house_number: Optional[str] = None
    street: Optional[str] = None
    ward: Optional[str] = None
    district: Optional[str] = None
    city: str = "Ho Chi Minh City"

    @property
    def street_full(self) -> Optional[str]:
        if not self.street:
            return None
        return f"{self.house_number} {self.street}" if self.house_number else self.street


def normalize_city(raw: Optional[str]) -> str:
    if not raw:
        return "Ho Chi Minh City"
    value = raw.strip()
    for aliases, canonical in CITY_ALIASES:
        if any(a in value for a in aliases):
            return canonical
    return value


def parse_address(address: str) -> AddressParts:
    parts = [p.strip() for p in address.split(",") if p.strip()]
    out = AddressParts()
    if not parts:
        return out

    m = re.match(r"^(\d+[A-Z]?(?:/\d+[A-Z]?)*)\s+(.+)", parts[0])
    if m:
        out.house_number, out.street = m.group(1), m.group(2).strip()
    else:
        out.street = parts[0]

    out.ward = next((p for p in parts if "Phường" in p or p.startswith("P.")), None)
    out.district = next(
        (p for p in parts if any(k in p for k in ("Quận", "Huyện", "Thị xã", "Q."))),
        None,
    )
    out.city = normalize_city(parts[-1] if len(parts) > 1 else None)
    return out


def district_viewbox(district: Optional[str], city: str) -> Optional[str]:
    if not district or city != "Ho Chi Minh City":
        return None
    key = district.replace("Quận", "").replace("Q.", "").strip()
    return HCMC_VIEWBOXES.get(key, HCMC_BOX)


def coordinates_of(result: Dict[str, Any]) -> Optional[Tuple[float, float]]:
    try:
        return float(result["lat"]), float(result["lon"])
    except (KeyError, TypeError, ValueError):
        return None


def best_result(results: List[Dict[str, Any]], parts: AddressParts) -> Optional[Dict[str, Any]]:
    """Highest scoring result that carries usable coordinates."""
    best, best_score = None, 0.0
    for r in results:
        if not isinstance(r, dict) or coordinates_of(r) is None:
            continue
        score = float(r.get("importance") or 0) * 100
        kind = r.get("type") or ""
        if (r.get("address") or {}).get("house_number"):
            score += 300
        if kind in ("house", "building"):
            score += 150
        if kind in ("amenity", "office"):
            score += 120
        if r.get("osm_type") == "node":
            score += 50
        if parts.house_number and kind in ("road", "highway"):
            score -= 100
        if score > best_score:
            best, best_score = r, score
    return best


class NominatimGeocoder:
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        rate_limit_seconds: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.base_url = base_url or settings.GEOCODER_BASE_URL
        self.user_agent = user_agent or settings.GEOCODER_USER_AGENT
        self.rate_limit = settings.GEOCODER_RATE_LIMIT_SECONDS if rate_limit_seconds is None else rate_limit_seconds
        self.timeout = timeout or settings.GEOCODER_TIMEOUT_SECONDS
        self.transport = transport
        self.sleep = sleep

    def _queries(self, parts: AddressParts) -> List[Tuple[str, Dict[str, Any]]]:
        street = parts.street_full
        if not street:
            return []
        common = {"format": "json", "addressdetails": 1}
        queries = [
            ("structured", {
                **common,
                "street": street,
                "city": parts.district or "",
                "state": parts.city,
                "country": "Vietnam",
                "limit": 5,
            }),
        ]
        viewbox = district_viewbox(parts.district, parts.city)
        if viewbox:
            queries.append(("viewbox", {
                **common,
                "q": f"{street}, {parts.district}, {parts.city}",
                "limit": 10,
                "countrycodes": "vn",
                "viewbox": viewbox,
                "bounded": 1,
            }))
        simple = ", ".join(p for p in (parts.street, parts.district, parts.city, "Vietnam") if p)
        queries.append(("simple", {**common, "q": simple, "limit": 10, "countrycodes": "vn"}))
        return queries

    async def geocode(self, address: str) -> Optional[Tuple[float, float]]:
        """(latitude, longitude) or None when no strategy finds the address."""
        if not address or not address.strip():
            return None
        parts = parse_address(address)
        last_error: Optional[Exception] = None

        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        ) as client:
            for strategy, params in self._queries(parts):
                try:
                    r = await client.get(self.base_url, params=params)
                    r.raise_for_status()
                    results = r.json() or []
                    if not isinstance(results, list):
                        raise ValueError(f"expected a result list, got {type(results).__name__}")
                except (httpx.HTTPError, ValueError) as e:
                    logger.warning("geocoding %s strategy failed: %s", strategy, e)
                    last_error = e
                    await self.sleep(self.rate_limit)
                    continue

                best = best_result(results, parts)
                await self.sleep(self.rate_limit)
                if best is not None:
                    lat, lon = coordinates_of(best)
                    logger.info("geocoded via %s: %s -> (%s, %s)", strategy, address, lat, lon)
                    return lat, lon

        if last_error is not None:
            raise GeocodingFailure(str(last_error))
        logger.warning("no coordinates found for %s", address)
        return None
