"""Public download route: ``/-<entry id>``."""

from django.urls import path

from server.apps.entries import views

urlpatterns = [
    path(
        '-<str:entry_id>',
        views.EntryDownloadView.as_view(),
        name='entry-download',
    ),
]
