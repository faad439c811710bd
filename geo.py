from math import radians, sin, cos, sqrt, atan2

EARTH_RADIUS_KM = 6371


def haversine_km(lat1, lng1, lat2, lng2):
    """
    Great-circle distance in km between two (lat, lng) points in decimal degrees.
    Coordinates are not range-checked.
    """
    d_lat = radians(lat2 - lat1)
    d_lng = radians(lng2 - lng1)

    a = sin(d_lat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(d_lng / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_KM * c
