from unittest.mock import MagicMock, patch

import requests
from django.test import SimpleTestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from .models import Country
from . import utils
from .utils import (
    CountryFetchError,
    CountryNotFound,
    InvalidCountryName,
    fetch_all_countries,
    fetch_country,
    prepare_country_details,
    search_countries,
)

BASE_URL = "https://countries.test/v3.1"

CANADA = {
    "name": {"common": "Canada", "official": "Canada"},
    "capital": ["Ottawa"],
    "independent": True,
    "unMember": True,
    "currencies": {"CAD": {"name": "Canadian dollar", "symbol": "$"}},
    "altSpellings": ["CA"],
    "region": "Americas",
    "subregion": "North America",
    "languages": {"eng": "English", "fra": "French"},
    "borders": ["USA"],
    "population": 38005238,
    "car": {"signs": ["CDN"], "side": "right"},
    "maps": {"googleMaps": "https://goo.gl/maps/jmEVLugreeqiZXxbA"},
    "flags": {"png": "https://flagcdn.com/w320/ca.png", "svg": "https://flagcdn.com/ca.svg"},
}

CANADIAN_ISLANDS = {"name": {"common": "Canadian Islands", "official": "Canadian Islands"}}


def fake_response(payload=None, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Client Error", response=resp
        )
    return resp


@override_settings(COUNTRIES_API_BASE_URL=BASE_URL, COUNTRIES_API_TIMEOUT=5)
class FetchCountryTests(SimpleTestCase):

    @patch("countries.utils.requests.get")
    def test_returns_exact_match_ignoring_case(self, mock_get):
        mock_get.return_value = fake_response([CANADIAN_ISLANDS, CANADA])

        for query in ("Canada", "canada", "CANADA", "  cAnAdA "):
            self.assertEqual(fetch_country(query), CANADA)

    @patch("countries.utils.requests.get")
    def test_requests_trimmed_and_quoted_name(self, mock_get):
        mock_get.return_value = fake_response([{"name": {"common": "United States"}}])

        fetch_country("  United States ")

        mock_get.assert_called_once_with(
            f"{BASE_URL}/name/United%20States", params=None, timeout=5
        )

    @patch("countries.utils.requests.get")
    def test_blank_name_fails_before_any_request(self, mock_get):
        for blank in ("", "   ", "\t\n", None):
            with self.assertRaises(InvalidCountryName) as ctx:
                fetch_country(blank)
            self.assertEqual(str(ctx.exception), "Country name is required.")
        self.assertEqual(mock_get.call_count, 0)

    @patch("countries.utils.requests.get")
    def test_no_exact_match_raises_not_found(self, mock_get):
        mock_get.return_value = fake_response([CANADIAN_ISLANDS])

        with self.assertRaises(CountryNotFound) as ctx:
            fetch_country("Canada")

        self.assertEqual(str(ctx.exception), 'No exact match found for "Canada".')
        self.assertEqual(ctx.exception.query, "Canada")

    @patch("countries.utils.requests.get")
    def test_empty_body_is_not_found(self, mock_get):
        mock_get.return_value = fake_response(None)

        with self.assertRaises(CountryNotFound):
            fetch_country("Canada")

    @patch("countries.utils.requests.get")
    def test_candidates_without_names_are_skipped(self, mock_get):
        mock_get.return_value = fake_response([{}, {"name": None}, None, CANADA])

        self.assertEqual(fetch_country("Canada"), CANADA)

    @patch("countries.utils.requests.get")
    def test_http_error_is_wrapped_with_status(self, mock_get):
        mock_get.return_value = fake_response({"status": 404}, status_code=404)

        with self.assertRaises(CountryFetchError) as ctx:
            fetch_country("Atlantis")

        err = ctx.exception
        self.assertTrue(str(err).startswith('Failed to fetch country "Atlantis": '))
        self.assertEqual(err.status_code, 404)
        self.assertIsInstance(err.cause, requests.HTTPError)
        self.assertIs(err.__cause__, err.cause)

    @patch("countries.utils.requests.get")
    def test_malformed_body_is_a_fetch_error(self, mock_get):
        resp = fake_response()
        resp.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = resp

        with self.assertRaises(CountryFetchError) as ctx:
            fetch_country("Canada")
        self.assertIsNone(ctx.exception.status_code)

    @patch("countries.utils.requests.get")
    def test_non_list_body_is_a_fetch_error(self, mock_get):
        for body in (5, "Canada", {"status": 200, "message": "x"}):
            mock_get.return_value = fake_response(body)

            with self.assertRaises(CountryFetchError) as ctx:
                fetch_country("Canada")
            self.assertIn("unexpected response body", str(ctx.exception))
            self.assertIsInstance(ctx.exception.cause, ValueError)

    @patch("countries.utils.requests.get")
    def test_not_found_is_logged_as_warning(self, mock_get):
        mock_get.return_value = fake_response([CANADIAN_ISLANDS])

        with self.assertLogs("countries.utils", level="WARNING") as logs:
            with self.assertRaises(CountryNotFound):
                fetch_country("Canada")
        self.assertIn("No exact match", logs.output[0])


@override_settings(COUNTRIES_API_BASE_URL=BASE_URL, COUNTRIES_API_TIMEOUT=5)
class FetchAllCountriesTests(SimpleTestCase):

    @patch("countries.utils.requests.get")
    def test_returns_listing(self, mock_get):
        mock_get.return_value = fake_response([CANADA, CANADIAN_ISLANDS])

        self.assertEqual(fetch_all_countries(), [CANADA, CANADIAN_ISLANDS])
        mock_get.assert_called_once_with(f"{BASE_URL}/all", params=None, timeout=5)

    @patch("countries.utils.requests.get")
    def test_fields_are_sent_comma_joined(self, mock_get):
        mock_get.return_value = fake_response([])

        fetch_all_countries(["name", "flags"])

        mock_get.assert_called_once_with(
            f"{BASE_URL}/all", params={"fields": "name,flags"}, timeout=5
        )

    @patch("countries.utils.requests.get")
    def test_string_fields_are_sent_unchanged(self, mock_get):
        mock_get.return_value = fake_response([])

        fetch_all_countries("name,flags")

        mock_get.assert_called_once_with(
            f"{BASE_URL}/all", params={"fields": "name,flags"}, timeout=5
        )

    @patch("countries.utils.requests.get")
    def test_empty_body_gives_empty_list(self, mock_get):
        mock_get.return_value = fake_response(None)

        self.assertEqual(fetch_all_countries(), [])

    @patch("countries.utils.requests.get")
    def test_network_error_message(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("Name or service not known")

        with self.assertRaises(CountryFetchError) as ctx:
            fetch_all_countries()

        self.assertIn("Failed to fetch all countries", str(ctx.exception))
        self.assertIn("Name or service not known", str(ctx.exception))
        self.assertIsNone(ctx.exception.status_code)


@override_settings(COUNTRIES_API_BASE_URL=BASE_URL, COUNTRIES_API_TIMEOUT=5)
class SearchCountriesTests(SimpleTestCase):

    @patch("countries.utils.requests.get")
    def test_returns_candidates_unfiltered(self, mock_get):
        mock_get.return_value = fake_response([CANADA, CANADIAN_ISLANDS])

        self.assertEqual(search_countries("Can"), [CANADA, CANADIAN_ISLANDS])
        mock_get.assert_called_once_with(f"{BASE_URL}/name/Can", params=None, timeout=5)

    @patch("countries.utils.requests.get")
    def test_blank_partial_fails_before_any_request(self, mock_get):
        with self.assertRaises(InvalidCountryName) as ctx:
            search_countries("  ")

        self.assertEqual(str(ctx.exception), "Partial country name is required.")
        mock_get.assert_not_called()

    @patch("countries.utils.requests.get")
    def test_timeout_mentions_partial(self, mock_get):
        mock_get.side_effect = requests.Timeout("read timed out")

        with self.assertRaises(CountryFetchError) as ctx:
            search_countries("Can")

        self.assertIn('Failed to fetch countries matching "Can"', str(ctx.exception))
        self.assertEqual(ctx.exception.query, "Can")

    @patch("countries.utils.requests.get")
    def test_non_list_body_is_a_fetch_error(self, mock_get):
        for body in (5, {"status": 200, "message": "x"}):
            mock_get.return_value = fake_response(body)

            with self.assertRaises(CountryFetchError) as ctx:
                search_countries("Can")
            self.assertIn("unexpected response body", str(ctx.exception))

    @patch("countries.utils.requests.get")
    def test_empty_body_gives_empty_list(self, mock_get):
        mock_get.return_value = fake_response(None)

        self.assertEqual(search_countries("Can"), [])


class PrepareCountryDetailsTests(SimpleTestCase):

    def test_full_record(self):
        self.assertEqual(prepare_country_details(CANADA), {
            "common_name": "Canada",
            "official_name": "Canada",
            "capital_city": "Ottawa",
            "independent": True,
            "un_member": True,
            "currencies": "Canadian dollar ($)",
            "alt_spellings": ["CA"],
            "region": "Americas",
            "subregion": "North America",
            "languages": ["English", "French"],
            "borders": ["USA"],
            "population": 38005238,
            "car_signs": ["CDN"],
            "car_side": "right",
            "google_maps": "https://goo.gl/maps/jmEVLugreeqiZXxbA",
            "flag": "https://flagcdn.com/ca.svg",
        })

    def test_two_currencies_keep_upstream_order(self):
        details = prepare_country_details({
            "currencies": {
                "USD": {"name": "US Dollar", "symbol": "$"},
                "EUR": {"name": "Euro", "symbol": "€"},
            }
        })
        self.assertEqual(details["currencies"], "US Dollar ($), Euro (€)")

    def test_currency_without_symbol_uses_code(self):
        details = prepare_country_details({"currencies": {"CKD": {"name": "Cook Islands dollar"}}})
        self.assertEqual(details["currencies"], "Cook Islands dollar (CKD)")

    def test_empty_record_gets_defaults(self):
        self.assertEqual(prepare_country_details({}), {
            "common_name": None,
            "official_name": None,
            "capital_city": None,
            "independent": False,
            "un_member": False,
            "currencies": "",
            "alt_spellings": [],
            "region": None,
            "subregion": None,
            "languages": [],
            "borders": [],
            "population": 0,
            "car_signs": [],
            "car_side": None,
            "google_maps": None,
            "flag": None,
        })

    def test_null_nested_fields_never_raise(self):
        record = {
            "name": None, "capital": [], "currencies": None, "languages": None,
            "car": None, "maps": None, "flags": None, "borders": None,
        }
        details = prepare_country_details(record)
        self.assertIsNone(details["common_name"])
        self.assertIsNone(details["capital_city"])
        self.assertEqual(details["currencies"], "")
        self.assertEqual(details["car_signs"], [])

    def test_population_is_a_non_negative_int(self):
        cases = [
            (38005238, 38005238),
            (1234.9, 1234),
            ("5000", 5000),
            (-10, 0),
            ("many", 0),
            (None, 0),
            ([1], 0),
            (True, 0),
        ]
        for raw, expected in cases:
            self.assertEqual(prepare_country_details({"population": raw})["population"], expected)

    def test_languages_list_is_kept(self):
        details = prepare_country_details({"languages": ["English", "French"]})
        self.assertEqual(details["languages"], ["English", "French"])

    def test_same_input_same_output(self):
        self.assertEqual(prepare_country_details(CANADA), prepare_country_details(CANADA))
        self.assertEqual(prepare_country_details({}), prepare_country_details({}))


@override_settings(COUNTRIES_API_BASE_URL=BASE_URL, COUNTRIES_API_ALL_FIELDS=["name", "flags"])
class CountryViewTests(APITestCase):

    @patch("countries.utils.requests.get")
    def test_detail_fetches_and_stores_missing_country(self, mock_get):
        mock_get.return_value = fake_response([CANADA])

        resp = self.client.get("/countries/canada")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["common_name"], "Canada")
        self.assertEqual(resp.data["languages"], ["English", "French"])
        stored = Country.objects.get(common_name="Canada")
        self.assertIsNotNone(stored.last_refreshed_at)

    @patch("countries.utils.requests.get")
    def test_detail_serves_stored_country_without_request(self, mock_get):
        Country.objects.create(common_name="Canada", population=1)

        resp = self.client.get("/countries/CANADA")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["population"], 1)
        mock_get.assert_not_called()

    @patch("countries.utils.requests.get")
    def test_detail_not_found(self, mock_get):
        mock_get.return_value = fake_response([CANADIAN_ISLANDS])

        resp = self.client.get("/countries/Canada")

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["error"], "Country not found")
        self.assertFalse(Country.objects.exists())

    @patch("countries.utils.requests.get")
    def test_upstream_404_maps_to_404(self, mock_get):
        mock_get.return_value = fake_response({"status": 404}, status_code=404)

        resp = self.client.get("/countries/Atlantis")

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    @patch("countries.utils.requests.get")
    def test_upstream_outage_maps_to_503(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")

        resp = self.client.get("/countries/Canada")

        self.assertEqual(resp.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(resp.data["error"], "External data source unavailable")

    @patch("countries.utils.requests.get")
    def test_unexpected_body_maps_to_503(self, mock_get):
        mock_get.return_value = fake_response(5)

        resp = self.client.get("/countries/Canada")

        self.assertEqual(resp.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_delete(self):
        Country.objects.create(common_name="Canada")

        self.assertEqual(self.client.delete("/countries/canada").status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.delete("/countries/canada").status_code, status.HTTP_404_NOT_FOUND)

    @patch("countries.utils.requests.get")
    def test_refresh_overwrites_stored_record(self, mock_get):
        Country.objects.create(common_name="Canada", population=1)
        mock_get.return_value = fake_response([CANADA])

        resp = self.client.post("/countries/Canada/refresh")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(Country.objects.count(), 1)
        self.assertEqual(Country.objects.get().population, 38005238)

    def test_list_stored_countries(self):
        Country.objects.create(common_name="Peru")
        Country.objects.create(common_name="Chile")

        resp = self.client.get("/countries")

        self.assertEqual([c["common_name"] for c in resp.data], ["Chile", "Peru"])

    @patch("countries.utils.requests.get")
    def test_all_uses_configured_fields(self, mock_get):
        mock_get.return_value = fake_response([CANADA])

        resp = self.client.get("/countries/all")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(mock_get.call_args.kwargs["params"], {"fields": "name,flags"})

    @patch("countries.utils.requests.get")
    def test_search(self, mock_get):
        mock_get.return_value = fake_response([CANADA, CANADIAN_ISLANDS])

        resp = self.client.get("/countries/search", {"q": "Can"})

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 2)

    @patch("countries.utils.requests.get")
    def test_search_requires_query(self, mock_get):
        self.assertEqual(self.client.get("/countries/search").status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            self.client.get("/countries/search", {"q": " "}).status_code,
            status.HTTP_400_BAD_REQUEST,
        )
        mock_get.assert_not_called()


class GetNowTests(SimpleTestCase):

    def test_is_timezone_aware(self):
        self.assertIsNotNone(utils.get_now().tzinfo)
