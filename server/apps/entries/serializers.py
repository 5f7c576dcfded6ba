"""Request and response serializers for the entries API.

Request bodies use the camelCase keys clients send; ``source`` maps them
onto the snake_case arguments of the logic layer.
"""

from typing import Any, override

from rest_framework import serializers

from server.apps.entries.exceptions import InvalidArgumentError
from server.apps.entries.infrastructure.identifiers import (
    parse_declared_size,
    parse_expiration_days,
)
from server.apps.entries.models import Entry
from server.apps.entries.payloads import FileUpload, PastedText, UploadPayload


class LifetimeField(serializers.Field):
    """Lifetime in days, lenient: junk or non-positive means never expires."""

    @override
    def to_internal_value(self, data: Any) -> int | None:
        return parse_expiration_days(data)

    @override
    def to_representation(self, value: Any) -> Any:
        return value


class DeclaredSizeField(serializers.Field):
    """Size a client announces for a chunked upload."""

    @override
    def to_internal_value(self, data: Any) -> int:
        try:
            return parse_declared_size(data)
        except InvalidArgumentError as error:
            raise serializers.ValidationError(str(error)) from error

    @override
    def to_representation(self, value: Any) -> Any:
        return value


def _optional_text(**kwargs: Any) -> serializers.CharField:
    return serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        trim_whitespace=False,
        **kwargs,
    )


class EntrySerializer(serializers.ModelSerializer):
    """Entry as listed by the API."""

    # Present only on querysets annotated by list_entries
    download_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Entry
        fields = [
            'id',
            'filename',
            'content_type',
            'size',
            'upload_time',
            'expiration_time',
            'note',
            'guest_link_id',
            'download_count',
        ]


class EntryUploadSerializer(serializers.Serializer):
    """Form of a single-shot upload: a file or pasted text."""

    file = serializers.FileField(required=False, allow_empty_file=True)
    pastedText = serializers.CharField(  # noqa: N815
        source='pasted_text',
        required=False,
        allow_blank=True,
    )
    note = _optional_text()
    expirationDays = LifetimeField(  # noqa: N815
        source='expiration_days',
        required=False,
        allow_null=True,
    )

    @override
    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs.get('file') is None and not attrs.get('pasted_text'):
            raise serializers.ValidationError('file or pastedText is required')
        return attrs

    def to_payload(self) -> UploadPayload:
        """Classify the validated form as a file or pasted text.

        Returns:
            Payload, the file taking precedence.
        """
        upload = self.validated_data.get('file')
        if upload is not None:
            return FileUpload(
                filename=upload.name or '',
                content_type=upload.content_type or '',
                data=upload.read(),
            )
        return PastedText(text=self.validated_data['pasted_text'])


class EntryUpdateSerializer(serializers.Serializer):
    """Body of an entry edit."""

    filename = _optional_text()
    note = _optional_text()
    deleteAfterExpiration = serializers.BooleanField(  # noqa: N815
        source='delete_after_expiration',
        required=False,
        default=False,
    )
    expirationDays = LifetimeField(  # noqa: N815
        source='expiration_days',
        required=False,
        allow_null=True,
    )

    def lifetime(self) -> int | None:
        """Lifetime to apply, only when the client opts into deletion."""
        if not self.validated_data['delete_after_expiration']:
            return None
        return self.validated_data.get('expiration_days')


class MultipartInitSerializer(serializers.Serializer):
    """Body opening a chunked upload."""

    filename = _optional_text()
    contentType = _optional_text(source='content_type')  # noqa: N815
    size = DeclaredSizeField(required=False, allow_null=True, default=0)
    note = _optional_text()
    expirationDays = LifetimeField(  # noqa: N815
        source='expiration_days',
        required=False,
        allow_null=True,
    )


class MultipartSessionSerializer(serializers.Serializer):
    """Body naming an existing chunked upload."""

    uploadId = serializers.CharField(  # noqa: N815
        source='upload_id',
        error_messages={
            'required': 'uploadId is required',
            'blank': 'uploadId is required',
            'null': 'uploadId is required',
        },
    )


class DownloadEventSerializer(serializers.Serializer):
    """One recorded download."""

    downloaded_at = serializers.DateTimeField()
    ip = serializers.IPAddressField(allow_null=True)
    user_agent = serializers.CharField()
