import logging

from django.conf import settings
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status
from .models import Country
from .serializers import CountrySerializer
from . import utils
from .utils import CountryFetchError, CountryNotFound, InvalidCountryName

logger = logging.getLogger(__name__)


def error_response(exc):
    """Map a CountryError onto the JSON error body and HTTP status."""
    if isinstance(exc, InvalidCountryName):
        return Response(
            {"error": "Validation failed", "details": str(exc)},
            status=status.HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, CountryNotFound) or (
        isinstance(exc, CountryFetchError) and exc.status_code == 404
    ):
        return Response(
            {"error": "Country not found", "details": str(exc)},
            status=status.HTTP_404_NOT_FOUND,
        )
    return Response(
        {"error": "External data source unavailable", "details": str(exc)},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


def store_country(raw, instance=None):
    """Normalize an upstream record and create or overwrite the stored row."""
    details = utils.prepare_country_details(raw)
    serializer = CountrySerializer(instance, data=details)
    serializer.is_valid(raise_exception=True)
    return serializer.save(last_refreshed_at=utils.get_now())


@api_view(['GET'])
def list_countries(request):
    """
    GET /countries
    Every stored country, ordered by common name.
    """
    serializer = CountrySerializer(Country.objects.all(), many=True)
    return Response(serializer.data)


@api_view(['GET'])
def all_countries(request):
    """
    GET /countries/all
    Pass-through of the upstream listing, limited to COUNTRIES_API_ALL_FIELDS.
    """
    try:
        data = utils.fetch_all_countries(settings.COUNTRIES_API_ALL_FIELDS)
    except utils.CountryError as e:
        return error_response(e)
    return Response(data)


@api_view(['GET'])
def search_countries(request):
    """
    GET /countries/search?q=<partial name>
    Upstream candidates for autocomplete; nothing is stored.
    """
    partial = request.query_params.get("q")
    if partial is None:
        return Response(
            {"error": "Validation failed", "details": {"q": "is required"}},
            status=status.HTTP_400_BAD_REQUEST,
        )
    try:
        data = utils.search_countries(partial)
    except utils.CountryError as e:
        return error_response(e)
    return Response(data)


@api_view(['GET', 'DELETE'])
def country_detail(request, name):
    """
    GET /countries/:name    -> stored record, fetched and saved first if missing (201)
    DELETE /countries/:name -> delete, return 204 or 404
    """
    country = Country.objects.filter(common_name__iexact=name.strip()).first()

    if request.method == 'DELETE':
        if country is None:
            return Response({"error": "Country not found"}, status=status.HTTP_404_NOT_FOUND)
        country.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    if country is not None:
        return Response(CountrySerializer(country).data)

    try:
        raw = utils.fetch_country(name)
    except utils.CountryError as e:
        return error_response(e)

    country = store_country(raw)
    logger.info("Stored %s from upstream", country.common_name)
    return Response(CountrySerializer(country).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
def refresh_country(request, name):
    """
    POST /countries/:name/refresh
    Re-fetch from upstream and overwrite (or create) the stored record.
    """
    try:
        raw = utils.fetch_country(name)
    except utils.CountryError as e:
        return error_response(e)

    common_name = utils.prepare_country_details(raw)["common_name"]
    existing = Country.objects.filter(common_name__iexact=common_name).first()
    country = store_country(raw, instance=existing)
    logger.info("Refreshed %s", country.common_name)
    return Response(
        CountrySerializer(country).data,
        status=status.HTTP_200_OK if existing else status.HTTP_201_CREATED,
    )
