"""Authenticated JSON API routes for entries, mounted under /api/."""

from django.urls import path

from server.apps.entries import views

app_name = 'entries'

urlpatterns = [
    path('entry', views.EntryCreateAPIView.as_view(), name='entry-create'),
    path('entries', views.EntryListAPIView.as_view(), name='entry-list'),
    path(
        'entry/multipart/init',
        views.MultipartInitAPIView.as_view(),
        name='multipart-init',
    ),
    path(
        'entry/multipart/part/<path:upload_id>/<str:part_number>',
        views.MultipartPartAPIView.as_view(),
        name='multipart-part',
    ),
    path(
        'entry/multipart/complete',
        views.MultipartCompleteAPIView.as_view(),
        name='multipart-complete',
    ),
    path(
        'entry/multipart/abort',
        views.MultipartAbortAPIView.as_view(),
        name='multipart-abort',
    ),
    path(
        'entry/<str:entry_id>/downloads',
        views.EntryDownloadsAPIView.as_view(),
        name='entry-downloads',
    ),
    path(
        'entry/<str:entry_id>',
        views.EntryDetailAPIView.as_view(),
        name='entry-detail',
    ),
    path(
        'system-info',
        views.SystemInfoAPIView.as_view(),
        name='system-info',
    ),
]
