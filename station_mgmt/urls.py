"""
URL configuration for the station_mgmt project.

Every API lives under /api/; the Django admin is the only server-rendered UI.
"""
from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include


def healthz(request):
    return JsonResponse({"status": "ok"})


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('accounts.urls')),
    path('api/fuel/', include('fuel.urls')),
    path('api/products/', include('products.urls')),
    path('api/debtors/', include('debtors.urls')),
    path('api/shifts/', include('shifts.urls')),
    path("healthz/", healthz),
]
