"""
URL configuration for the pharmacy billing backend.

Every app mounts its function views under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Pharmacy Billing Admin Panel"
admin.site.site_title = "Pharmacy Billing Admin Portal"
admin.site.index_title = "Welcome to the Pharmacy Billing Admin"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.inventory.urls')),
    path('api/v1/', include('backend.parties.urls')),
    path('api/v1/', include('backend.pos.urls')),
    path('api/v1/', include('backend.reports.urls')),
]
