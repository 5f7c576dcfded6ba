"""Localized messages shown to guest uploaders."""

from typing import Final

SUPPORTED_LANGUAGES: Final = ('en', 'zh')
DEFAULT_LANGUAGE: Final = 'en'

_MESSAGES: Final[dict[str, dict[str, str]]] = {
    'en': {
        'guest_link': 'Guest link',
        'link_expired': 'Guest link expired',
        'max_mb': 'max {size} MB',
        'unlimited_size': 'unlimited size',
        'uploads': 'uploads {used}/{max}',
        'unlimited_uploads': 'unlimited uploads',
        'file_exp_days': 'file expiration {days} days',
        'default_exp': 'default expiration',
        'url_expires': 'URL expires {date}',
        'url_never': 'URL never expires',
        'upload_limit_reached': 'Upload limit reached for this guest link.',
        'select_or_paste_first': 'Select a file or paste text first.',
        'upload_limit_exceeded': (
            'Upload limit exceeded. You can upload {left} more file(s).'
        ),
        'file_too_large': 'File "{name}" is too large. Max allowed is {max} MB.',
        'uploaded_files': 'Uploaded {count} file(s). URL(s): {urls}{suffix}',
        'more_suffix': ' (+{count} more)',
    },
    'zh': {
        'guest_link': '访客链接',
        'link_expired': '访客链接已过期',
        'max_mb': '最大 {size} MB',
        'unlimited_size': '大小不限',
        'uploads': '上传次数 {used}/{max}',
        'unlimited_uploads': '上传次数不限',
        'file_exp_days': '文件保留 {days} 天',
        'default_exp': '默认过期策略',
        'url_expires': '链接过期 {date}',
        'url_never': '链接永不过期',
        'upload_limit_reached': '该访客链接已达到上传次数上限。',
        'select_or_paste_first': '请先选择文件或粘贴文本。',
        'upload_limit_exceeded': '超出上传限制，你还可以上传 {left} 个文件。',
        'file_too_large': '文件“{name}”过大，最大允许 {max} MB。',
        'uploaded_files': '成功上传 {count} 个文件。URL：{urls}{suffix}',
        'more_suffix': '（另 {count} 个）',
    },
}


class _BlankMissing(dict[str, object]):
    """Format mapping that renders unknown placeholders as ''."""

    def __missing__(self, key: str) -> str:
        return ''


def normalize_language(lang: str | None) -> str:
    """Map a requested language onto a supported one.

    Args:
        lang: Requested language code, possibly blank.

    Returns:
        Supported language code, English by default.
    """
    if not lang:
        return DEFAULT_LANGUAGE
    normalized = lang.strip().lower()
    if normalized in SUPPORTED_LANGUAGES:
        return normalized
    return DEFAULT_LANGUAGE


def guest_message(lang: str | None, key: str, **variables: object) -> str:
    """Render a guest message in the requested language.

    Args:
        lang: Language code, unsupported values fall back to English.
        key: Message key.
        variables: Placeholder values.

    Returns:
        Rendered message.

    Raises:
        KeyError: If the message key is unknown.
    """
    template = _MESSAGES[normalize_language(lang)][key]
    return template.format_map(_BlankMissing(variables))
