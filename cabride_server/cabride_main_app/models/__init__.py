"""Models package - domain-based organization"""

# User models
from .user import Profile

# Location models
from .location import City, Route

# Fleet models
from .fleet import CabType, Driver

# Booking models
from .booking import Booking

# Rating models
from .rating import RatingRecord

__all__ = [
    'Profile', 'City', 'Route', 'CabType', 'Driver', 'Booking', 'RatingRecord',
]
