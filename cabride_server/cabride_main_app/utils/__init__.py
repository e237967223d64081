"""Utils package - helper functions and utilities"""

# Note: modules that import models are not imported here to avoid circular imports
from .constants import *
