"""Currency router - rates and conversion endpoints."""
from fastapi import APIRouter, Depends, Query

from agile_canvas.database import get_currency_service
from agile_canvas.models.project import Currency
from agile_canvas.services.currency_service import CurrencyRates, CurrencyService


router = APIRouter(prefix="/currency", tags=["currency"])


@router.get("/rates", response_model=CurrencyRates)
async def get_rates(currency_service: CurrencyService = Depends(get_currency_service)):
    """Current rate table (fallback rates until the first refresh)."""
    return currency_service.rates


@router.post("/refresh")
async def refresh_rates(currency_service: CurrencyService = Depends(get_currency_service)):
    """
    Refresh rates from the remote source.

    Returns:
        Dictionary with updated flag; failures keep the previous rates
    """
    updated = await currency_service.refresh_rates()
    return {"updated": updated}


@router.get("/convert")
async def convert(
    amount: float = Query(..., description="Amount to convert"),
    from_currency: Currency = Query(..., alias="from"),
    to_currency: Currency = Query(..., alias="to"),
    currency_service: CurrencyService = Depends(get_currency_service),
):
    """Convert an amount and format it for display."""
    converted = currency_service.convert(amount, from_currency, to_currency)
    return {
        "amount": converted,
        "currency": to_currency,
        "formatted": currency_service.format_currency(converted, to_currency),
    }
