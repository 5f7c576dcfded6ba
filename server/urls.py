"""Main URL mapping configuration file.

Include other URLConfs from external apps using method `include()`.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('server.apps.entries.urls')),
    path('api/', include('server.apps.guest_links.api_urls')),
    path('guest/', include('server.apps.guest_links.urls')),
    path('', include('server.apps.entries.download_urls')),
]
