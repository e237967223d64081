"""
Accepted ways of referring to a booking or a city in requests.

Raw request values are parsed once into one of these variants; services only
ever see the parsed form.
"""
from dataclasses import dataclass

from .constants import BusinessRules
from .errors import ValidationFailed


@dataclass(frozen=True)
class ById:
    id: int


@dataclass(frozen=True)
class ByNumber:
    booking_number: str


@dataclass(frozen=True)
class ByName:
    name: str


def _as_id(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return int(text) if text.isdigit() else None


def parse_booking_lookup(value):
    """Internal id (int or digit string) or a human booking number like CB2410174K9Z"""
    if isinstance(value, (ById, ByNumber)):
        return value
    if value is None or str(value).strip() == '':
        raise ValidationFailed('Booking id is required')

    booking_id = _as_id(value)
    if booking_id is not None:
        return ById(booking_id)

    number = str(value).strip().upper()
    if not number.startswith(BusinessRules.BOOKING_NUMBER_PREFIX):
        raise ValidationFailed(f'Invalid booking reference: {value}')
    return ByNumber(number)


def parse_city_lookup(value):
    """City id or city name"""
    if isinstance(value, (ById, ByName)):
        return value
    if value is None or str(value).strip() == '':
        raise ValidationFailed('City is required')

    city_id = _as_id(value)
    if city_id is not None:
        return ById(city_id)
    return ByName(str(value).strip())


def parse_id(value, label='id'):
    """Plain integer id for drivers and users"""
    parsed = _as_id(value) if value is not None else None
    if parsed is None:
        raise ValidationFailed(f'Invalid {label}: {value}')
    return parsed
