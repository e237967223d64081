"""
Distance and fare calculation helpers

Pure functions: no database access. Cities are any objects exposing
``name``, ``latitude`` and ``longitude`` (the City model does).
"""
import math
from decimal import Decimal, ROUND_HALF_UP

from geopy.distance import great_circle

from .constants import BusinessRules, JourneyType, RoadType
from .errors import ValidationFailed

EARTH_RADIUS_KM = 6371

ROAD_FACTORS = {
    RoadType.DEFAULT: 1.3,  # mixed Indian road network
    RoadType.URBAN: 1.4,
    RoadType.HIGHWAY: 1.2,
}

# Measured road distances (km) for popular pairs, keyed by lower-cased city names
KNOWN_ROAD_DISTANCES = {
    ('rajkot', 'delhi'): 1140,
    ('rajkot', 'mumbai'): 660,
    ('rajkot', 'ahmedabad'): 220,
    ('rajkot', 'surat'): 325,
    ('rajkot', 'jaipur'): 790,
    ('delhi', 'mumbai'): 1400,
    ('delhi', 'bangalore'): 2150,
    ('ahmedabad', 'mumbai'): 520,
}

CITY_COORDINATES = {
    'rajkot': (22.3039, 70.8022),
    'mumbai': (19.0760, 72.8777),
    'delhi': (28.7041, 77.1025),
    'ahmedabad': (23.0225, 72.5714),
    'surat': (21.1702, 72.8311),
    'bangalore': (12.9716, 77.5946),
    'hyderabad': (17.3850, 78.4867),
    'jaipur': (26.9124, 75.7873),
    'chennai': (13.0827, 80.2707),
    'kolkata': (22.5726, 88.3639),
}

TWO_PLACES = Decimal('0.01')


def _coordinate(value, limit, label):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f'Invalid {label}: {value!r}')
    if not math.isfinite(number) or abs(number) > limit:
        raise ValidationFailed(f'Invalid {label}: {value!r}')
    return number


def haversine_distance(lat1, lon1, lat2, lon2):
    """Great-circle distance in km between two points given in degrees"""
    start = (_coordinate(lat1, 90, 'latitude'), _coordinate(lon1, 180, 'longitude'))
    end = (_coordinate(lat2, 90, 'latitude'), _coordinate(lon2, 180, 'longitude'))
    return great_circle(start, end, radius=EARTH_RADIUS_KM).km


def road_distance(straight_line_km, road_type=RoadType.DEFAULT):
    factor = ROAD_FACTORS.get(road_type, ROAD_FACTORS[RoadType.DEFAULT])
    return straight_line_km * factor


def known_distance(name_a, name_b, known_distances=None):
    """Recorded road distance for the pair in either direction, or None"""
    table = KNOWN_ROAD_DISTANCES if known_distances is None else known_distances
    if not name_a or not name_b:
        return None
    a, b = name_a.strip().lower(), name_b.strip().lower()
    if (a, b) in table:
        return table[(a, b)]
    return table.get((b, a))


def distance_between_cities(city_a, city_b, road_type=RoadType.DEFAULT, known_distances=None):
    """
    Road distance in km between two cities.

    A recorded distance for the pair wins verbatim; otherwise the haversine
    distance is scaled by the road factor. Both cities need coordinates either way.
    """
    for city in (city_a, city_b):
        if city is None or getattr(city, 'latitude', None) is None or getattr(city, 'longitude', None) is None:
            raise ValidationFailed('Invalid city coordinates')

    recorded = known_distance(getattr(city_a, 'name', None), getattr(city_b, 'name', None), known_distances)
    if recorded is not None:
        return recorded

    straight_line = haversine_distance(city_a.latitude, city_a.longitude, city_b.latitude, city_b.longitude)
    return road_distance(straight_line, road_type)


def round_whole(value):
    """Round half away from zero to a whole currency unit"""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def calculate_fare(distance_km, cab_type, is_night_time=False):
    """
    Fare breakdown for a distance priced with a cab type profile

    Args:
        distance_km: Trip distance in km
        cab_type: CabType (or any object with the same pricing attributes)
        is_night_time: Whether the night charge applies

    Returns:
        dict with base_fare, extra_km_fare, fuel_charge, driver_charge,
        night_charge, total_fare and distance, each rounded to whole units

    Raises:
        ValidationFailed: If distance or cab type is missing
    """
    if cab_type is None or not distance_km:
        raise ValidationFailed('Cab type and distance are required')

    distance = Decimal(str(distance_km))
    base_fare = Decimal(cab_type.base_km_price) * distance
    extra_km = max(Decimal('0'), distance - Decimal(cab_type.included_km or 0))
    extra_km_fare = extra_km * Decimal(cab_type.extra_fare_per_km or 0)

    fuel_charge = Decimal('0') if cab_type.fuel_charges_included else Decimal(cab_type.fuel_charge or 0)
    driver_charge = Decimal('0') if cab_type.driver_charges_included else Decimal(cab_type.driver_charge or 0)
    night_charge = Decimal('0')
    if is_night_time and not cab_type.night_charges_included:
        night_charge = Decimal(cab_type.night_charge or 0)

    total_fare = base_fare + extra_km_fare + fuel_charge + driver_charge + night_charge

    return {
        'base_fare': round_whole(base_fare),
        'extra_km_fare': round_whole(extra_km_fare),
        'fuel_charge': round_whole(fuel_charge),
        'driver_charge': round_whole(driver_charge),
        'night_charge': round_whole(night_charge),
        'total_fare': round_whole(total_fare),
        'distance': round_whole(distance),
    }


def is_night_time(pickup_time):
    """True when the pickup hour of an "HH:MM" string is 22 or later, or 5 or earlier"""
    try:
        hour = int(str(pickup_time).split(':')[0])
    except (TypeError, ValueError):
        return False
    return hour >= BusinessRules.NIGHT_START_HOUR or hour <= BusinessRules.NIGHT_END_HOUR


def _money(value):
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def quote_simple_fare(distance_km, journey_type, pickup_time, toll_charges=0):
    """
    Flat per-km fare used at booking creation when no cab type profile applies.

    base = distance x rate (doubled for round trips), tax on base, a driver
    allowance for long or round trips, and a night surcharge on base.
    """
    distance = Decimal(str(distance_km or 0))
    round_trip = journey_type == JourneyType.ROUND_TRIP

    base_amount = distance * BusinessRules.SIMPLE_RATE_PER_KM
    if round_trip:
        base_amount *= 2
    tax_amount = base_amount * Decimal(str(BusinessRules.SIMPLE_TAX_RATE))

    driver_allowance = Decimal('0')
    if distance > BusinessRules.LONG_DISTANCE_KM or round_trip:
        driver_allowance = Decimal(BusinessRules.DRIVER_ALLOWANCE)

    night_charges = Decimal('0')
    if is_night_time(pickup_time):
        night_charges = base_amount * Decimal(str(BusinessRules.SIMPLE_NIGHT_SURCHARGE_RATE))

    quote = {
        'base_amount': _money(base_amount),
        'tax_amount': _money(tax_amount),
        'toll_charges': _money(toll_charges or 0),
        'driver_allowance': _money(driver_allowance),
        'night_charges': _money(night_charges),
    }
    quote['total_amount'] = sum(quote.values(), Decimal('0'))
    return quote
