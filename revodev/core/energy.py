"""Household energy consumption and cost estimate (no model involved)."""

from revodev.api.schemas import (
    ApplianceConsumption,
    EnergyConsumptionRequest,
    EnergyConsumptionResponse,
)

PERIOD_MULTIPLIERS = {
    "day": 1,
    "week": 7,
    "month": 30,  # approximation
    "year": 365,
}


def estimate_consumption(request: EnergyConsumptionRequest) -> EnergyConsumptionResponse:
    """Compute kWh per appliance and in total for the requested period.

    Cost is only reported when a positive tariff (NGN/kWh) is given.
    """
    multiplier = PERIOD_MULTIPLIERS[request.period]

    breakdown = [
        ApplianceConsumption(
            name=appliance.name,
            kwh=round(appliance.watts * appliance.hours_per_day / 1000 * multiplier, 3),
        )
        for appliance in request.appliances
    ]
    daily_kwh = sum(a.watts * a.hours_per_day / 1000 for a in request.appliances)
    total_kwh = round(daily_kwh * multiplier, 3)

    total_cost = None
    if request.tariff and request.tariff > 0 and request.appliances:
        total_cost = round(daily_kwh * multiplier * request.tariff, 2)

    return EnergyConsumptionResponse(
        period=request.period,
        total_kwh=total_kwh,
        total_cost=total_cost,
        breakdown=breakdown,
    )
