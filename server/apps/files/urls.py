"""URL routes for files app."""

from django.urls import path

from server.apps.files import views

app_name = 'files'

urlpatterns = [
    path('files', views.files_list, name='list'),
    path('files/<str:file_id>', views.files_delete, name='delete'),
    path('upload', views.files_upload, name='upload'),
]
