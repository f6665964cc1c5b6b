"""Domain enumerations.

All enums use the (str, Enum) pattern to ensure JSON serialization compatibility.
"""

from enum import Enum


class ListingSort(str, Enum):
    """Client-requested ordering applied on top of the newest-first result set."""

    NEWEST = "newest"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    DISTANCE = "distance"


class Amenity(str, Enum):
    """Suggested amenity tags. Listings may carry any free-form tag."""

    WIFI = "WiFi"
    PARKING = "Parking"
    AC = "AC"
    LAUNDRY = "Laundry"
    DISHWASHER = "Dishwasher"
    POOL = "Pool"
    GYM = "Gym"
    STUDY_ROOM = "Study Room"
    BALCONY = "Balcony"
    YARD = "Yard"
