"""
Response helper utilities for turning ORM rows into response schemas
"""
from typing import Any, Dict, Optional
from datetime import datetime

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


def format_datetime(value: Optional[datetime], fmt: str = DATETIME_FORMAT) -> Optional[str]:
    if value is None:
        return None
    return value.strftime(fmt)


def product_to_dict(product) -> Dict[str, Any]:
    """Convert Product model to the ProductResponse shape"""
    return {
        'product_id': product.id,
        'title': product.title,
        'user_id': product.user_id,
        'price': product.price,
        'description': product.description,
        'country': product.country,
        'location': product.location,
        'available': product.available,
        'rank': product.rank,
        'thumbnail': product.thumbnail,
        'creation_date': format_datetime(product.created),
    }


def application_to_dict(application, receiver, product) -> Dict[str, Any]:
    """Convert Application model plus its receiver and product to the ApplicationResponse shape"""
    return {
        'application_id': application.id,
        'receiver_id': application.user_id,
        'receiver_name': f"{receiver.first_name} {receiver.sur_name}",
        'country': receiver.country,
        'thumbnail': receiver.thumbnail,
        'product_id': product.id,
        'product_title': product.title,
        'product_price': product.price,
        'producer_id': product.user_id,
        'motivation': application.motivation,
        'status': application.status,
        'unit_id': application.unit_id,
        'creation_date': format_datetime(application.created),
        'date_of_donation': format_datetime(application.date_of_donation, DATE_FORMAT),
    }
