"""JSON API and download views for entries.

Views only validate requests and shape responses; all behavior lives in
``server.apps.entries.logic``. Errors are rendered by
``server.apps.entries.exception_handler``.
"""

from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from django.db.models import QuerySet
from django.http import HttpResponse
from django.utils.http import content_disposition_header
from rest_framework import generics, permissions, views
from rest_framework.request import Request
from rest_framework.response import Response

from server.apps.entries.logic.entry_operations import (
    count_downloads,
    create_entry,
    delete_entry,
    get_entry,
    get_live_entry,
    get_system_info,
    list_download_events,
    list_entries,
    read_entry_content,
    record_download,
    update_entry,
)
from server.apps.entries.logic.multipart_operations import (
    abort_upload,
    complete_upload,
    init_upload,
    upload_part,
)
from server.apps.entries.models import Entry
from server.apps.entries.serializers import (
    DownloadEventSerializer,
    EntrySerializer,
    EntryUpdateSerializer,
    EntryUploadSerializer,
    MultipartInitSerializer,
    MultipartSessionSerializer,
)


def client_ip(request: Request) -> str | None:
    """Best-effort client address, honoring X-Forwarded-For.

    Args:
        request: Incoming request.

    Returns:
        Client IP or None.
    """
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        address = forwarded.split(',')[0].strip()
    else:
        address = request.META.get('REMOTE_ADDR', '')
    try:
        validate_ipv46_address(address)
    except ValidationError:
        return None
    return address


class EntryCreateAPIView(views.APIView):
    """Upload a file or pasted text in one request."""

    def post(self, request: Request) -> Response:
        serializer = EntryUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = create_entry(
            serializer.to_payload(),
            note=serializer.validated_data.get('note'),
            expiration_days=serializer.validated_data.get('expiration_days'),
        )
        return Response({'id': entry.id, 'filename': entry.filename})


class EntryListAPIView(generics.ListAPIView):
    """List all entries, newest first, with download counts."""

    serializer_class = EntrySerializer

    def get_queryset(self) -> QuerySet[Entry]:
        return list_entries()


class EntryDetailAPIView(views.APIView):
    """Read, edit or delete one entry."""

    def get(self, request: Request, entry_id: str) -> Response:
        data = EntrySerializer(get_entry(entry_id)).data
        data['download_count'] = count_downloads(entry_id)
        return Response(data)

    def put(self, request: Request, entry_id: str) -> Response:
        get_entry(entry_id)
        serializer = EntryUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        update_entry(
            entry_id,
            filename=serializer.validated_data.get('filename'),
            note=serializer.validated_data.get('note'),
            expiration_days=serializer.lifetime(),
        )
        return Response({'ok': True})

    def delete(self, request: Request, entry_id: str) -> Response:
        get_entry(entry_id)
        delete_entry(entry_id)
        return Response({'ok': True})


class EntryDownloadsAPIView(views.APIView):
    """List download events of one entry."""

    def get(self, request: Request, entry_id: str) -> Response:
        get_entry(entry_id)
        events = list_download_events(
            entry_id,
            unique_ips=request.query_params.get('uniqueIps') == '1',
        )
        return Response({
            'total': count_downloads(entry_id),
            'events': DownloadEventSerializer(events, many=True).data,
        })


class MultipartInitAPIView(views.APIView):
    """Open a chunked upload session."""

    def post(self, request: Request) -> Response:
        serializer = MultipartInitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        started = init_upload(
            filename=data.get('filename'),
            content_type=data.get('content_type'),
            declared_size=data.get('size'),
            note=data.get('note'),
            expiration_days=data.get('expiration_days'),
        )
        return Response({
            'uploadId': started.upload_id,
            'id': started.entry_id,
            'chunkSize': started.chunk_size,
        })


class MultipartPartAPIView(views.APIView):
    """Accept one chunk as the raw request body."""

    def put(
        self,
        request: Request,
        upload_id: str,
        part_number: str,
    ) -> Response:
        acknowledged = upload_part(upload_id, part_number, request.body)
        return Response({'ok': True, 'partNumber': acknowledged})


class MultipartCompleteAPIView(views.APIView):
    """Assemble the uploaded chunks into an entry."""

    def post(self, request: Request) -> Response:
        serializer = MultipartSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        completed = complete_upload(serializer.validated_data['upload_id'])
        return Response({
            'id': completed.entry_id,
            'filename': completed.filename,
        })


class MultipartAbortAPIView(views.APIView):
    """Abandon a chunked upload; succeeds for known and unknown ids."""

    def post(self, request: Request) -> Response:
        serializer = MultipartSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        abort_upload(serializer.validated_data['upload_id'])
        return Response({'ok': True})


class SystemInfoAPIView(views.APIView):
    """Report stored bytes and row counts."""

    def get(self, request: Request) -> Response:
        return Response(get_system_info())


class EntryDownloadView(views.APIView):
    """Serve an entry's content and record the download.

    Public. An entry past its expiration time is deleted on the spot and
    answered with 410.
    """

    authentication_classes = ()
    permission_classes = (permissions.AllowAny,)

    def get(self, request: Request, entry_id: str) -> HttpResponse:
        entry = get_live_entry(entry_id)
        content = read_entry_content(entry)
        record_download(
            entry,
            ip=client_ip(request),
            user_agent=request.headers.get('User-Agent', ''),
        )

        response = HttpResponse(content, content_type=entry.content_type)
        response['Content-Disposition'] = content_disposition_header(
            as_attachment=False,
            filename=entry.filename,
        )
        return response
