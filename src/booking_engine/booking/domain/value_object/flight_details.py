from __future__ import annotations

from dataclasses import dataclass

from booking_engine.booking.domain.enum import FlightType

ROUTE_ARROW = "➝"
LEG_SEPARATOR = "|"


def normalize_route(route: str, flight_type: FlightType) -> str:
    """往復で片道分しか指定されていない経路を "A ➝ B | B ➝ A" に展開する"""
    route = route.strip()
    if flight_type is not FlightType.ROUND_TRIP or LEG_SEPARATOR in route:
        return route

    origin, arrow, destination = route.partition(ROUTE_ARROW)
    if not arrow:
        return route
    origin, destination = origin.strip(), destination.strip()
    return (
        f"{origin} {ROUTE_ARROW} {destination} {LEG_SEPARATOR} "
        f"{destination} {ROUTE_ARROW} {origin}"
    )


@dataclass(frozen=True)
class FlightDetails:
    """表示用のフライト概要（正本はプロバイダの注文）"""

    airline: str
    flight_number: str
    route: str
    departure_date: str
    arrival_date: str
    duration: str
    flight_type: FlightType = FlightType.ONE_WAY
    logo_url: str | None = None

    def __post_init__(self) -> None:
        normalized = normalize_route(self.route, self.flight_type)
        object.__setattr__(self, "route", normalized)
