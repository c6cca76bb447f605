from django.urls import path
from . import views


urlpatterns = [
    # GET /countries → Stored countries
    path('countries', views.list_countries, name='list_countries'),
    path('countries/', views.list_countries),

    # GET /countries/all → Upstream listing (not stored)
    path('countries/all', views.all_countries, name='all_countries'),
    # GET /countries/search?q= → Upstream partial-name matches
    path('countries/search', views.search_countries, name='search_countries'),

    # POST /countries/<name>/refresh → Re-fetch and overwrite
    path('countries/<str:name>/refresh', views.refresh_country, name='refresh_country'),
    # GET or DELETE /countries/<name> → Country detail or delete
    path('countries/<str:name>', views.country_detail, name='country_detail'),
]
