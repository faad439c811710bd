import pytest
from geo import haversine_km

def test_identical_points_are_zero():
    assert haversine_km(6.5244, 3.3792, 6.5244, 3.3792) == 0

def test_distance_is_symmetric():
    lagos = (6.5244, 3.3792)
    ibadan = (7.3775, 3.9470)
    assert haversine_km(*lagos, *ibadan) == pytest.approx(haversine_km(*ibadan, *lagos))

def test_one_degree_of_longitude_at_equator():
    """Known fixture: (0,0) -> (0,1) is about 111.19 km."""
    assert haversine_km(0, 0, 0, 1) == pytest.approx(111.19, abs=0.01)

def test_grows_with_separation():
    near = haversine_km(0, 0, 0.01, 0)
    far = haversine_km(0, 0, 0.1, 0)
    assert 0 < near < far

def test_out_of_range_input_is_not_rejected():
    """No validation: nonsense coordinates still give a number."""
    assert haversine_km(200, 0, -200, 400) >= 0
