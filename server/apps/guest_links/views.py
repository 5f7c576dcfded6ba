"""Guest link views: public guest upload and authenticated management."""

from django.db.models import QuerySet
from django.urls import reverse
from rest_framework import generics, permissions, status, views
from rest_framework.request import Request
from rest_framework.response import Response

from server.apps.entries.exceptions import InvalidArgumentError
from server.apps.guest_links.logic.link_operations import (
    create_guest_link,
    delete_guest_link,
    get_guest_link,
    list_guest_links,
)
from server.apps.guest_links.logic.quota_operations import (
    GuestUploadAccepted,
    GuestUploadRejection,
    upload_as_guest,
)
from server.apps.guest_links.messages import guest_message, normalize_language
from server.apps.guest_links.models import GuestLink
from server.apps.guest_links.serializers import (
    GuestLinkCreateSerializer,
    GuestLinkSerializer,
    GuestUploadSerializer,
)

_LISTED_URLS = 3
_BYTES_PER_MB = 1024 * 1024


def describe_limits(link: GuestLink, lang: str) -> list[str]:
    """Summarize a link's limits for the guest.

    Args:
        link: GuestLink instance.
        lang: Language code.

    Returns:
        One localized line per limit.
    """
    if link.max_file_bytes:
        size = guest_message(
            lang,
            'max_mb',
            size=round(link.max_file_bytes / _BYTES_PER_MB),
        )
    else:
        size = guest_message(lang, 'unlimited_size')

    if link.max_file_uploads:
        uploads = guest_message(
            lang,
            'uploads',
            used=link.upload_count,
            max=link.max_file_uploads,
        )
    else:
        uploads = guest_message(lang, 'unlimited_uploads')

    if link.max_file_lifetime_days:
        lifetime = guest_message(
            lang,
            'file_exp_days',
            days=link.max_file_lifetime_days,
        )
    else:
        lifetime = guest_message(lang, 'default_exp')

    if link.url_expires:
        expiry = guest_message(
            lang,
            'url_expires',
            date=link.url_expires.date().isoformat(),
        )
    else:
        expiry = guest_message(lang, 'url_never')

    return [size, uploads, lifetime, expiry]


def rejection_response(rejection: GuestUploadRejection, lang: str) -> Response:
    """Answer a refused guest batch.

    Args:
        rejection: Why the batch was refused.
        lang: Language code.

    Returns:
        Response with the rejection's status code.
    """
    message = rejection.message(lang)
    body = {
        'error': message,
        'reason': str(rejection.reason),
        'message': message,
    }
    if rejection.remaining_uploads is not None:
        body['remaining'] = rejection.remaining_uploads
    if rejection.max_file_bytes is not None:
        body['max_file_bytes'] = rejection.max_file_bytes
    if rejection.filename is not None:
        body['filename'] = rejection.filename
    return Response(body, status=rejection.status_code)


class GuestUploadView(views.APIView):
    """Describe a guest link or accept a guest batch. Public."""

    authentication_classes = ()
    permission_classes = (permissions.AllowAny,)

    def get(self, request: Request, link_id: str) -> Response:
        lang = normalize_language(request.query_params.get('lang'))
        link = get_guest_link(link_id)
        if link.is_expired():
            return Response(
                {'error': guest_message(lang, 'link_expired')},
                status=status.HTTP_410_GONE,
            )

        title = link.label or f'{guest_message(lang, "guest_link")} {link.id}'
        return Response({
            'id': link.id,
            'title': title,
            'limits': describe_limits(link, lang),
            'remaining_uploads': link.remaining_uploads,
            'lang': lang,
        })

    def post(self, request: Request, link_id: str) -> Response:
        serializer = GuestUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lang = normalize_language(
            serializer.validated_data.get('lang')
            or request.query_params.get('lang'),
        )

        try:
            outcome = upload_as_guest(
                link_id,
                serializer.to_payloads(),
                note=serializer.validated_data.get('note'),
            )
        except InvalidArgumentError:
            return Response(
                {'error': guest_message(lang, 'select_or_paste_first')},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if isinstance(outcome, GuestUploadRejection):
            return rejection_response(outcome, lang)
        return Response(self._accepted_body(request, outcome, lang))

    def _accepted_body(
        self,
        request: Request,
        outcome: GuestUploadAccepted,
        lang: str,
    ) -> dict[str, object]:
        entry_ids = outcome.entry_ids
        urls = [
            request.build_absolute_uri(
                reverse('entry-download', args=[entry_id]),
            )
            for entry_id in entry_ids
        ]
        hidden = len(urls) - _LISTED_URLS
        suffix = ''
        if hidden > 0:
            suffix = guest_message(lang, 'more_suffix', count=hidden)
        message = guest_message(
            lang,
            'uploaded_files',
            count=len(entry_ids),
            urls=', '.join(urls[:_LISTED_URLS]),
            suffix=suffix,
        )
        return {'ids': entry_ids, 'urls': urls, 'message': message}


class GuestLinkListCreateAPIView(generics.ListAPIView):
    """List guest links or create one."""

    serializer_class = GuestLinkSerializer

    def get_queryset(self) -> QuerySet[GuestLink]:
        return list_guest_links()

    def post(self, request: Request) -> Response:
        serializer = GuestLinkCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        link = create_guest_link(**serializer.validated_data)
        return Response({'id': link.id})


class GuestLinkDeleteAPIView(views.APIView):
    """Delete a guest link; deleting an unknown link succeeds."""

    def delete(self, request: Request, link_id: str) -> Response:
        delete_guest_link(link_id)
        return Response({'ok': True})
