"""
URL configuration for countryhub project.

    /countries...  country lookup, search and stored records (countries.urls)
    /auth/...      signup and login returning session tokens (accounts.urls)
"""
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('countries.urls')),
    path('auth/', include('accounts.urls')),
]


def custom_404(request, exception):
    return JsonResponse({"error": "Endpoint not found, try /countries or /auth/token"}, status=404)


def custom_500(request):
    return JsonResponse({"error": "Internal server error"}, status=500)


handler404 = "countryhub.urls.custom_404"
handler500 = "countryhub.urls.custom_500"
