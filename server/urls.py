"""
Main URL mapping configuration file.

Include other URLConfs from external apps using method `include()`.

It is also a good practice to keep a single URL to the root index page.

This examples uses Django's default media
files serving technique in development.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    # Apps:
    path('', include('server.apps.accounts.urls', namespace='accounts')),
    path('', include('server.apps.files.urls', namespace='files')),

    # django-admin:
    path('admin/', admin.site.urls),
]

handler404 = 'server.apps.core.http.not_found'
handler500 = 'server.apps.core.http.server_error'
