"""Authenticated guest link management routes, mounted under /api/."""

from django.urls import path

from server.apps.guest_links import views

urlpatterns = [
    path(
        'guest-links',
        views.GuestLinkListCreateAPIView.as_view(),
        name='guest-link-collection',
    ),
    path(
        'guest-links/<str:link_id>',
        views.GuestLinkDeleteAPIView.as_view(),
        name='guest-link-delete',
    ),
]
