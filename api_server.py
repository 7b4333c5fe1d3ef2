from typing import List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from freshbasket import config
from freshbasket.errors import CatalogUnavailable
from freshbasket.logger import setup_logger
from freshbasket.pricing.engine import batch_quote, calculate_quote
from freshbasket.service import CatalogService, CheckoutService, CustomizationService

app = FastAPI(title="FreshBasket pricing")


class QuoteLine(BaseModel):
    price: float = Field(ge=0)
    quantity: int = Field(ge=0)


class QuoteRequest(BaseModel):
    basePrice: Optional[float] = None
    valuePrice: Optional[float] = None
    items: List[QuoteLine] = []
    reference: Optional[str] = None


class CustomizeRequest(BaseModel):
    actions: List[str] = []


def _lines(req: QuoteRequest):
    # str() keeps the decimal digits the client sent
    return [{"price": str(line.price), "quantity": line.quantity} for line in req.items]


def _fetch_package(package_id: str):
    try:
        with CatalogService() as catalog:
            return catalog.fetch_package(package_id)
    except CatalogUnavailable as e:
        raise HTTPException(status_code=502, detail=f"Failed to load package details: {e}")


@app.post("/quote")
def quote(req: QuoteRequest):
    return calculate_quote(_lines(req), req.basePrice, req.valuePrice).to_dict()


@app.post("/quote/batch")
def quote_batch(reqs: List[QuoteRequest]):
    return batch_quote([
        {
            "reference": req.reference,
            "items": _lines(req),
            "base_price": req.basePrice,
            "value_price": req.valuePrice,
        }
        for req in reqs
    ])


@app.get("/packages/{package_id}/session")
def package_session(package_id: str):
    package = _fetch_package(package_id)
    customization = CustomizationService()
    session, _ = customization.replay(package, [])
    return customization.session_view(session)


@app.post("/packages/{package_id}/customize")
def customize_package(package_id: str, req: CustomizeRequest):
    package = _fetch_package(package_id)
    customization = CustomizationService()
    try:
        session, results = customization.replay(package, req.actions)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    view = customization.session_view(session)
    view["actions"] = results
    handoff = CheckoutService().handoff(session)
    view["handoff"] = handoff.to_dict() if handoff else None
    return view


if __name__ == "__main__":
    setup_logger()
    uvicorn.run(app, host=config.SERVER_HOST, port=config.SERVER_PORT)
