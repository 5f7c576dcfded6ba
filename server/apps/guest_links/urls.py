"""Public guest upload routes, mounted under /guest/."""

from django.urls import path

from server.apps.guest_links import views

urlpatterns = [
    path(
        '<str:link_id>',
        views.GuestUploadView.as_view(),
        name='guest-upload',
    ),
]
