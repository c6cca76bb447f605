from django.db import models


class Country(models.Model):
    # id — auto-generated
    common_name = models.CharField(max_length=200, unique=True)
    official_name = models.CharField(max_length=300, null=True, blank=True)
    capital_city = models.CharField(max_length=200, null=True, blank=True)
    independent = models.BooleanField(default=False)
    un_member = models.BooleanField(default=False)
    # currencies — display string, e.g. "US Dollar ($), Euro (€)"
    currencies = models.TextField(blank=True, default="")
    alt_spellings = models.JSONField(default=list, blank=True)
    region = models.CharField(max_length=100, null=True, blank=True)
    subregion = models.CharField(max_length=100, null=True, blank=True)
    languages = models.JSONField(default=list, blank=True)
    # borders — cca3 codes of neighbouring countries
    borders = models.JSONField(default=list, blank=True)
    population = models.BigIntegerField(default=0)
    car_signs = models.JSONField(default=list, blank=True)
    car_side = models.CharField(max_length=10, null=True, blank=True)
    google_maps = models.URLField(null=True, blank=True)
    flag = models.URLField(null=True, blank=True)
    # last_refreshed_at — updated each time the record is written from upstream
    last_refreshed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["common_name"]

    def __str__(self):
        return self.common_name
