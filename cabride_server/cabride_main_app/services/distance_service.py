"""Distance service - city resolution, route lookup and fare quotes"""
import logging
import math

from ..models import CabType, City, Route
from ..utils.constants import BusinessRules, RoadType
from ..utils.errors import service_result, NotFound
from ..utils.geo import calculate_fare, distance_between_cities, is_night_time
from ..utils.lookups import ById, parse_city_lookup

logger = logging.getLogger(__name__)

LOCAL_JOURNEY = 'local'


def road_type_for(journey_type):
    return RoadType.URBAN if journey_type == LOCAL_JOURNEY else RoadType.HIGHWAY


def estimated_minutes(distance_km):
    return math.ceil(distance_km / BusinessRules.AVERAGE_SPEED_KMPH * 60)


class DistanceService:
    def resolve_city(self, value):
        lookup = parse_city_lookup(value)
        cities = City.objects.filter(active=True)
        if isinstance(lookup, ById):
            city = cities.filter(pk=lookup.id).first()
        else:
            city = cities.filter(name__iexact=lookup.name).first()
        if city is None:
            raise NotFound(f'City {value} not found')
        return city

    def resolve_cab_type(self, value):
        lookup = parse_city_lookup(value)
        cab_types = CabType.objects.filter(active=True)
        if isinstance(lookup, ById):
            cab_type = cab_types.filter(pk=lookup.id).first()
        else:
            cab_type = cab_types.filter(name__iexact=lookup.name).first()
        if cab_type is None:
            raise NotFound(f'Cab type {value} not found')
        return cab_type

    def distance_for(self, source, destination, journey_type=None):
        """
        Road distance between two City rows.

        Returns (distance_km, route, basis) where basis is 'route' when a Route
        row supplied the distance, otherwise 'estimate'.
        """
        route = Route.between(source, destination)
        if route is not None:
            return route.distance, route, 'route'
        distance = distance_between_cities(source, destination, road_type_for(journey_type))
        return distance, None, 'estimate'

    @service_result
    def calculate(self, source, destination, journey_type=None, cab_type=None, pickup_time=None):
        """
        Distance, duration and an optional fare quote for a city pair

        Args:
            source: City id or name
            destination: City id or name
            journey_type: 'local' prices with urban roads, anything else with highways
            cab_type: Optional CabType id or name to price the trip with
            pickup_time: "HH:MM", decides the night charge
        """
        source_city = self.resolve_city(source)
        destination_city = self.resolve_city(destination)
        distance, route, basis = self.distance_for(source_city, destination_city, journey_type)

        result = {
            'source': source_city.name,
            'destination': destination_city.name,
            'distance': round(distance, 2),
            'duration': route.estimated_time if route else estimated_minutes(distance),
            'basis': basis,
            'toll_charges': str(route.toll_charges) if route else '0.00',
        }

        if cab_type is not None:
            profile = self.resolve_cab_type(cab_type)
            result['cab_type'] = profile.name
            result['fare'] = calculate_fare(distance, profile, is_night_time(pickup_time))

        logger.info(f'[DISTANCE] {source_city.name} -> {destination_city.name}: {result["distance"]} km ({basis})')
        return result
