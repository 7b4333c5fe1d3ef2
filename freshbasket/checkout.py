"""
Checkout order module.
Turns a checkout handoff plus the shopper's contact/delivery details into the
order document the order service accepts.
"""
from typing import Any, Dict, Optional

from freshbasket import config
from freshbasket.handoff import CheckoutHandoff
from freshbasket.pricing.rounding import format_money


def build_order_payload(
    handoff: CheckoutHandoff,
    customer: Dict[str, str],
    shipping_address: Dict[str, str],
    *,
    delivery_day: str = config.DEFAULT_DELIVERY_DAY,
    delivery_time: str = config.DEFAULT_DELIVERY_TIME,
    payment_method: str = "cash_on_delivery",
    note: str = ""
) -> Dict[str, Any]:
    """
    Build the order document.

    - names are trimmed, email lower-cased
    - pricing: itemsPrice = totalPrice = final package price, no delivery fee
    """
    if payment_method not in config.PAYMENT_METHODS:
        raise ValueError(f"Unsupported payment method: {payment_method}")

    phone = customer.get("phone", "")
    final_price = format_money(handoff.final_price)

    return {
        "customer": {
            "firstName": customer.get("firstName", "").strip(),
            "lastName": customer.get("lastName", "").strip(),
            "email": customer.get("email", "").strip().lower(),
            "phone": phone,
        },
        "package": {
            "id": handoff.package.package_id,
            "name": handoff.package.name,
            "basePrice": format_money(handoff.package_base_price),
            "valuePrice": format_money(handoff.package_value_price) if handoff.package_value_price else None,
        },
        "orderItems": [
            {
                "productId": item.product_id,
                "name": item.name,
                "price": format_money(item.price),
                "quantity": item.quantity,
                "image": item.product.image or None,
                "unit": item.product.unit or config.DEFAULT_UNIT,
            }
            for item in handoff.basket
        ],
        "shippingAddress": {
            "address": shipping_address.get("address", ""),
            "city": shipping_address.get("city", ""),
            "region": shipping_address.get("region", ""),
            "phone": shipping_address.get("phone") or phone,
        },
        "deliverySchedule": {
            "preferredDay": delivery_day,
            "preferredTime": delivery_time,
        },
        "deliveryNote": note,
        "paymentMethod": payment_method,
        "pricing": {
            "itemsPrice": final_price,
            "deliveryFee": "0.00",
            "totalPrice": final_price,
        },
    }


def summarize_order(payload: Dict[str, Any], order_number: Optional[str] = None) -> Dict[str, Any]:
    """Confirmation summary shown once the order is accepted."""
    return {
        "orderNumber": order_number,
        "total": payload["pricing"]["totalPrice"],
        "deliveryDay": payload["deliverySchedule"]["preferredDay"],
        "itemsCount": sum(item["quantity"] for item in payload["orderItems"]),
        "packageName": payload["package"]["name"],
    }
