"""Tests for the geocoding module."""

import unittest
from unittest.mock import MagicMock, patch

import requests

from ramadan.geocoding import OPEN_METEO_URL, OpenMeteoGeocodingProvider


def mock_response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status = MagicMock()
    return resp


HYDERABAD_IN = {
    "name": "Hyderabad",
    "latitude": 17.38405,
    "longitude": 78.45636,
    "country": "India",
    "timezone": "Asia/Kolkata",
}
HYDERABAD_PK = {
    "name": "Hyderabad",
    "latitude": 25.39242,
    "longitude": 68.37366,
    "country": "Pakistan",
    "timezone": "Asia/Karachi",
}


class TestOpenMeteoGeocodingProvider(unittest.TestCase):
    def setUp(self):
        self.provider = OpenMeteoGeocodingProvider()

    @patch("ramadan.geocoding.requests.get")
    def test_prefers_result_in_requested_country(self, mock_get):
        mock_get.return_value = mock_response({"results": [HYDERABAD_IN, HYDERABAD_PK]})
        location = self.provider.search(" Hyderabad ", "pakistan")
        self.assertEqual(location, {
            "city": "Hyderabad",
            "country": "Pakistan",
            "latitude": 25.39242,
            "longitude": 68.37366,
            "timezone": "Asia/Karachi",
        })
        self.assertEqual(mock_get.call_args[0][0], OPEN_METEO_URL)
        self.assertEqual(mock_get.call_args[1]["params"]["name"], "Hyderabad")

    @patch("ramadan.geocoding.requests.get")
    def test_falls_back_to_top_result(self, mock_get):
        mock_get.return_value = mock_response({"results": [HYDERABAD_IN]})
        self.assertEqual(self.provider.search("Hyderabad", "Nowhere")["country"], "India")

    @patch("ramadan.geocoding.requests.get")
    def test_no_results(self, mock_get):
        mock_get.return_value = mock_response({"generationtime_ms": 0.5})
        self.assertIsNone(self.provider.search("Atlantis", "Greece"))

    @patch("ramadan.geocoding.requests.get")
    def test_network_error_returns_none(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")
        self.assertIsNone(self.provider.search("Lahore", "Pakistan"))

    @patch("ramadan.geocoding.requests.get")
    def test_blank_city_is_not_looked_up(self, mock_get):
        self.assertIsNone(self.provider.search("  "))
        mock_get.assert_not_called()


if __name__ == "__main__":
    unittest.main()
