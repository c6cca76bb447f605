from rest_framework import serializers
from .models import Country


class CountrySerializer(serializers.ModelSerializer):
    class Meta:
        model = Country
        fields = [
            'id', 'common_name', 'official_name', 'capital_city',
            'independent', 'un_member', 'currencies', 'alt_spellings',
            'region', 'subregion', 'languages', 'borders', 'population',
            'car_signs', 'car_side', 'google_maps', 'flag',
            'last_refreshed_at',
        ]
        read_only_fields = ['id', 'last_refreshed_at']

    def validate(self, data):
        """
        Upstream records must at least name the country; population may be
        missing upstream but never negative.
        """
        errors = {}
        if not data.get("common_name"):
            errors["common_name"] = "is required"
        if (data.get("population") or 0) < 0:
            errors["population"] = "must not be negative"

        if errors:
            raise serializers.ValidationError({
                "error": "Validation failed",
                "details": errors
            })

        return data
