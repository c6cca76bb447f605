"""
Client for the REST Countries API.

Three lookups (exact name, full listing, partial-name search) plus
``prepare_country_details`` which flattens one upstream record into the
shape stored in ``countries.models.Country``. Every failure is raised as a
``CountryError`` subclass; nothing is retried or cached here.
"""
import logging
from datetime import datetime, timezone
from urllib.parse import quote

import requests
from django.conf import settings
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://restcountries.com/v3.1"
DEFAULT_TIMEOUT = 15


class CountryError(Exception):
    """Base class for country lookup failures. ``query`` is the offending input."""

    def __init__(self, message, query=None):
        super().__init__(message)
        self.query = query


class InvalidCountryName(CountryError, ValueError):
    pass


class CountryNotFound(CountryError):
    pass


class CountryFetchError(CountryError):
    """The HTTP call failed: connection error, timeout, non-2xx status or bad JSON."""

    def __init__(self, message, query=None, cause=None):
        super().__init__(message, query)
        self.cause = cause
        response = getattr(cause, "response", None)
        self.status_code = response.status_code if response is not None else None


def _base_url():
    return getattr(settings, "COUNTRIES_API_BASE_URL", DEFAULT_BASE_URL).rstrip("/")


def _get_json(path, params=None):
    url = f"{_base_url()}/{path}"
    timeout = getattr(settings, "COUNTRIES_API_TIMEOUT", DEFAULT_TIMEOUT)
    resp = requests.get(url, params=params, timeout=timeout)
    logger.debug("GET %s -> %s", url, resp.status_code)
    resp.raise_for_status()
    data = resp.json()
    if data and not isinstance(data, list):
        raise ValueError(f"unexpected response body: {type(data).__name__}")
    return data


def _require_name(value, message):
    if not isinstance(value, str) or not value.strip():
        raise InvalidCountryName(message, query=value)
    return value.strip()


def fetch_country(name):
    """
    Return the upstream record whose common name equals ``name`` ignoring case.

    Raises InvalidCountryName for a blank name, CountryNotFound when none of
    the candidates match exactly and CountryFetchError when the call fails.
    """
    query = _require_name(name, "Country name is required.")

    try:
        candidates = _get_json(f"name/{quote(query, safe='')}") or []
    except (RequestException, ValueError) as e:
        logger.warning("Country lookup for %r failed: %s", query, e)
        raise CountryFetchError(f'Failed to fetch country "{name}": {e}', query=name, cause=e) from e

    wanted = query.lower()
    for country in candidates:
        if not isinstance(country, dict):
            continue
        common = _mapping(country.get("name")).get("common")
        if isinstance(common, str) and common.lower() == wanted:
            return country

    logger.warning("No exact match for %r among %d candidates", query, len(candidates))
    raise CountryNotFound(f'No exact match found for "{name}".', query=name)


def fetch_all_countries(fields=None):
    """Return every country upstream knows about, or [] for an empty body."""
    if isinstance(fields, (list, tuple)):
        fields = ",".join(fields)
    params = {"fields": fields} if fields else None
    try:
        data = _get_json("all", params=params)
    except (RequestException, ValueError) as e:
        logger.warning("Fetching all countries failed: %s", e)
        raise CountryFetchError(f"Failed to fetch all countries: {e}", cause=e) from e
    return data or []


def search_countries(partial):
    """Candidates upstream matches for a partial name; no filtering is applied here."""
    query = _require_name(partial, "Partial country name is required.")

    try:
        data = _get_json(f"name/{quote(query, safe='')}")
    except (RequestException, ValueError) as e:
        logger.warning("Country search for %r failed: %s", query, e)
        raise CountryFetchError(
            f'Failed to fetch countries matching "{partial}": {e}', query=partial, cause=e
        ) from e
    return data or []


def _mapping(value):
    return value if isinstance(value, dict) else {}


def _list(value):
    return list(value) if isinstance(value, (list, tuple)) else []


def _languages(value):
    if isinstance(value, dict):
        return list(value.values())
    return _list(value)


def _population(value):
    # non-negative int; anything non-numeric counts as unknown
    if isinstance(value, bool):
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def format_currencies(currencies):
    # {"USD": {"name": "US Dollar", "symbol": "$"}} -> "US Dollar ($)"
    parts = []
    for code, info in _mapping(currencies).items():
        info = _mapping(info)
        name = info.get("name") or code
        symbol = info.get("symbol") or code
        parts.append(f"{name} ({symbol})")
    return ", ".join(parts)


def prepare_country_details(country):
    """Flatten one REST Countries record into the stored country shape."""
    country = _mapping(country)
    names = _mapping(country.get("name"))
    capital = _list(country.get("capital"))
    car = _mapping(country.get("car"))

    return {
        "common_name": names.get("common") or None,
        "official_name": names.get("official") or None,
        "capital_city": capital[0] if capital and capital[0] else None,
        "independent": bool(country.get("independent")),
        "un_member": bool(country.get("unMember")),
        "currencies": format_currencies(country.get("currencies")),
        "alt_spellings": _list(country.get("altSpellings")),
        "region": country.get("region") or None,
        "subregion": country.get("subregion") or None,
        "languages": _languages(country.get("languages")),
        "borders": _list(country.get("borders")),
        "population": _population(country.get("population")),
        "car_signs": _list(car.get("signs")),
        "car_side": car.get("side") or None,
        "google_maps": _mapping(country.get("maps")).get("googleMaps") or None,
        "flag": _mapping(country.get("flags")).get("svg") or None,
    }


def get_now():
    """Return current UTC datetime (aware)."""
    return datetime.now(timezone.utc)
