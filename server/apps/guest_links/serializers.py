"""Request and response serializers for guest links."""

from typing import Any, override

from rest_framework import serializers

from server.apps.entries.infrastructure.identifiers import (
    MAX_EXPIRATION_DAYS,
    parse_timestamp,
)
from server.apps.entries.payloads import FileUpload, PastedText, UploadPayload
from server.apps.guest_links.logic.link_operations import (
    MAX_BYTES_LIMIT,
    MAX_COUNT_LIMIT,
    parse_optional_limit,
)
from server.apps.guest_links.models import GuestLink


class OptionalLimitField(serializers.Field):
    """Limit where missing, zero or junk means unlimited."""

    def __init__(self, maximum: int = MAX_COUNT_LIMIT, **kwargs: Any) -> None:
        """Initialize the field.

        Args:
            maximum: Largest accepted value, larger input is capped.
            kwargs: Field options.
        """
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)
        self.maximum = maximum

    @override
    def to_internal_value(self, data: Any) -> int | None:
        return parse_optional_limit(data, self.maximum)

    @override
    def to_representation(self, value: Any) -> Any:
        return value


class TimestampField(serializers.Field):
    """ISO 8601 timestamp, blank or unparsable meaning none."""

    @override
    def to_internal_value(self, data: Any) -> Any:
        return parse_timestamp(data)

    @override
    def to_representation(self, value: Any) -> Any:
        return value


class GuestLinkSerializer(serializers.ModelSerializer):
    """Guest link as listed by the management API."""

    class Meta:
        model = GuestLink
        fields = [
            'id',
            'label',
            'created_time',
            'max_file_bytes',
            'max_file_lifetime_days',
            'max_file_uploads',
            'url_expires',
            'upload_count',
        ]


class GuestLinkCreateSerializer(serializers.Serializer):
    """Body creating a guest link."""

    label = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
    )
    max_file_bytes = OptionalLimitField(maximum=MAX_BYTES_LIMIT)
    max_file_lifetime_days = OptionalLimitField(maximum=MAX_EXPIRATION_DAYS)
    max_file_uploads = OptionalLimitField()
    url_expires = TimestampField(required=False, allow_null=True)


class GuestUploadSerializer(serializers.Serializer):
    """Form of a guest batch: any number of files plus optional text."""

    files = serializers.ListField(
        child=serializers.FileField(allow_empty_file=True),
        required=False,
    )
    file = serializers.FileField(required=False, allow_empty_file=True)
    pastedText = serializers.CharField(  # noqa: N815
        source='pasted_text',
        required=False,
        allow_blank=True,
    )
    note = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
    )
    lang = serializers.CharField(required=False, allow_blank=True)

    def to_payloads(self) -> list[UploadPayload]:
        """Collect every file and the pasted text of the batch.

        The ``files`` list wins over the single ``file`` field.

        Returns:
            Payloads in form order, pasted text last.
        """
        uploads = self.validated_data.get('files') or []
        single = self.validated_data.get('file')
        if not uploads and single is not None:
            uploads = [single]

        payloads: list[UploadPayload] = [
            FileUpload(
                filename=upload.name or '',
                content_type=upload.content_type or '',
                data=upload.read(),
            )
            for upload in uploads
        ]
        text = self.validated_data.get('pasted_text')
        if text:
            payloads.append(PastedText(text=text))
        return payloads
