from unittest.mock import MagicMock

import pandas as pd
from geopy.exc import GeocoderUnavailable
from geopy.location import Location

from geo.geocode import NominatimGeocoder, build_query, fill_missing_coords
from records.schema import has_coords


def _geocoder(geolocator):
    return NominatimGeocoder(user_agent="tests", min_interval=0, max_retries=0, geolocator=geolocator)


def test_build_query():
    row = pd.Series({"Strasse": "Dorfstraße", "Haus-Nr": "1", "PLZ": "21502", "Ort": "Worth"})
    assert build_query(row) == "Dorfstraße 1, 21502 Worth, Deutschland"
    assert build_query(pd.Series({"Ort": "Worth"})) == "Worth, Deutschland"


def test_geocode_hit():
    geolocator = MagicMock()
    geolocator.geocode.return_value = Location("Worth", (53.4599, 10.4102), {})
    hit = _geocoder(geolocator).geocode("Dorfstraße 1, 21502 Worth, Deutschland")
    assert hit == (53.4599, 10.4102)
    geolocator.geocode.assert_called_once_with("Dorfstraße 1, 21502 Worth, Deutschland", exactly_one=True)


def test_geocode_no_result():
    geolocator = MagicMock()
    geolocator.geocode.return_value = None
    assert _geocoder(geolocator).geocode("nowhere") is None


def test_geocode_service_error():
    geolocator = MagicMock()
    geolocator.geocode.side_effect = GeocoderUnavailable("offline")
    assert _geocoder(geolocator).geocode("somewhere") is None


def test_geocode_empty_query_skips_request():
    geolocator = MagicMock()
    assert _geocoder(geolocator).geocode("") is None
    geolocator.geocode.assert_not_called()


def test_default_geolocator_uses_settings():
    geocoder = NominatimGeocoder(min_interval=0)
    assert geocoder.geolocator.domain == "nominatim.openstreetmap.org"
    assert geocoder.geolocator.scheme == "https"


def test_fill_missing_coords(records):
    geocoder = MagicMock()
    geocoder.geocode.return_value = (53.4599, 10.4102)
    hits = []

    out, filled = fill_missing_coords(records, geocoder, on_hit=lambda row, lat, lon: hits.append(row["Ort"]))

    assert filled == 1
    assert has_coords(out).all()
    assert hits == ["Worth"]
    geocoder.geocode.assert_called_once_with("Dorfstraße 1, 21502 Worth, Deutschland")
    # input frame untouched
    assert not has_coords(records).all()


def test_fill_missing_coords_unresolved(records):
    geocoder = MagicMock()
    geocoder.geocode.return_value = None
    progress = MagicMock()
    out, filled = fill_missing_coords(records, geocoder, on_progress=progress)
    assert filled == 0
    assert has_coords(out).sum() == 2
    progress.assert_called_once_with(1, 1)
