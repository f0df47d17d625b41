"""Document upload gate.

Accepts a single uploaded file when either its declared MIME type or its
extension is in the allow-list for that kind of upload, caps its size, and
renames it before it is handed to storage so two uploads of the same file
never collide.

The gate never looks at the file contents: a caller that declares an allowed
MIME type or uses an allowed extension gets through.
"""
import logging
import os
import secrets
import time

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.files.uploadhandler import FileUploadHandler, StopUpload
from rest_framework import status
from rest_framework.exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_DOCUMENT_MIMES = frozenset([
    "application/pdf",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.oasis.opendocument.spreadsheet",
])
ALLOWED_DOCUMENT_EXTENSIONS = frozenset([".pdf", ".xls", ".xlsx", ".ods"])

ALLOWED_NOTE_MIMES = frozenset([
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
])
ALLOWED_NOTE_EXTENSIONS = frozenset([".pdf", ".doc", ".docx", ".ppt", ".pptx"])

INVALID_DOCUMENT_MESSAGE = "Invalid file type. Only PDF and Excel files are allowed (pdf, xls, xlsx, ods)"
INVALID_NOTE_MESSAGE = "Unsupported file type"
DOCUMENT_TOO_LARGE_MESSAGE = "File too large"

DEFAULT_DOCUMENT_MAX_BYTES = 50 * 1024 * 1024
DEFAULT_NOTE_MAX_BYTES = 10 * 1024 * 1024

# FileField.max_length for stored uploads; the whole relative path must fit
STORED_NAME_MAX_LENGTH = 255


class InvalidDocumentError(ValidationError):
    default_detail = INVALID_DOCUMENT_MESSAGE


class DocumentTooLargeError(ValidationError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_detail = DOCUMENT_TOO_LARGE_MESSAGE


class UploadRule:
    """Allow-list, size ceiling and storage folder for one kind of upload."""

    def __init__(self, mimes, extensions, invalid_message, max_bytes_setting, default_max_bytes,
                 subdir_setting, default_subdir):
        self.mimes = mimes
        self.extensions = extensions
        self.invalid_message = invalid_message
        self.max_bytes_setting = max_bytes_setting
        self.default_max_bytes = default_max_bytes
        self.subdir_setting = subdir_setting
        self.default_subdir = default_subdir

    @property
    def max_bytes(self) -> int:
        return int(getattr(settings, self.max_bytes_setting, self.default_max_bytes))

    @property
    def subdir(self) -> str:
        return getattr(settings, self.subdir_setting, self.default_subdir)

    def upload_dir(self) -> str:
        return os.path.join(settings.MEDIA_ROOT, self.subdir)

    def allows(self, filename: str, content_type: str = None) -> bool:
        """MIME type OR extension, never both required."""
        if content_type and content_type.split(";")[0].strip().lower() in self.mimes:
            return True
        ext = os.path.splitext(filename or "")[1].lower()
        return ext in self.extensions

    def storage_path(self, filename: str) -> str:
        prefix = f"{self.subdir}/"
        return prefix + unique_filename(filename, max_length=STORED_NAME_MAX_LENGTH - len(prefix))


TIMETABLE_DOCUMENTS = UploadRule(
    ALLOWED_DOCUMENT_MIMES,
    ALLOWED_DOCUMENT_EXTENSIONS,
    INVALID_DOCUMENT_MESSAGE,
    "SMARTLEARN_DOCUMENT_MAX_BYTES",
    DEFAULT_DOCUMENT_MAX_BYTES,
    "SMARTLEARN_TIMETABLE_UPLOAD_SUBDIR",
    "timetables",
)

LECTURE_NOTES = UploadRule(
    ALLOWED_NOTE_MIMES,
    ALLOWED_NOTE_EXTENSIONS,
    INVALID_NOTE_MESSAGE,
    "SMARTLEARN_NOTE_MAX_BYTES",
    DEFAULT_NOTE_MAX_BYTES,
    "SMARTLEARN_NOTE_UPLOAD_SUBDIR",
    "notes",
)


def document_max_bytes(rule=TIMETABLE_DOCUMENTS) -> int:
    return rule.max_bytes


def ensure_upload_dirs():
    paths = []
    for rule in (TIMETABLE_DOCUMENTS, LECTURE_NOTES):
        path = rule.upload_dir()
        os.makedirs(path, exist_ok=True)
        paths.append(path)
    return paths


def is_allowed_document(filename: str, content_type: str = None, rule=TIMETABLE_DOCUMENTS) -> bool:
    return rule.allows(filename, content_type)


def unique_filename(original_name: str, now_ms: int = None, suffix: int = None, max_length: int = None) -> str:
    """Build ``{stem}-{epoch_ms}-{9 random digits}{ext}`` from an upload name.

    With ``max_length`` the stem is shortened (measured in UTF-8 bytes) so the
    timestamp, random suffix and extension are always kept.
    """
    base = os.path.basename(original_name or "")
    stem, ext = os.path.splitext(base)
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if suffix is None:
        suffix = secrets.randbelow(10 ** 9)
    tail = f"-{now_ms}-{suffix:09d}{ext}"
    if max_length is not None:
        while stem and len(f"{stem}{tail}".encode("utf-8")) > max_length:
            stem = stem[:-1]
    return f"{stem}{tail}"


def timetable_document_path(instance, filename):
    return TIMETABLE_DOCUMENTS.storage_path(filename)


def lecture_note_path(instance, filename):
    return LECTURE_NOTES.storage_path(filename)


def check_document(uploaded, rule=TIMETABLE_DOCUMENTS, missing_message="Please upload a document"):
    """Validate an ``UploadedFile`` before it touches storage.

    Size is checked first and only from metadata, so an oversized file is
    rejected without reading any of its content.
    """
    if uploaded is None:
        raise ValidationError(missing_message)
    limit = rule.max_bytes
    if uploaded.size is not None and uploaded.size > limit:
        logger.warning("rejected upload %r: %s bytes exceeds %s", uploaded.name, uploaded.size, limit)
        raise DocumentTooLargeError()
    content_type = getattr(uploaded, "content_type", None)
    if not rule.allows(uploaded.name, content_type):
        logger.warning("rejected upload %r: type %r not allowed", uploaded.name, content_type)
        raise InvalidDocumentError(rule.invalid_message)
    return uploaded


def _validate_field_file(value, rule):
    inner = getattr(value, "file", value)
    content_type = getattr(inner, "content_type", None) or getattr(value, "content_type", None)
    size = getattr(value, "size", None)
    if size is not None and size > rule.max_bytes:
        raise DjangoValidationError(DOCUMENT_TOO_LARGE_MESSAGE)
    if not rule.allows(getattr(value, "name", ""), content_type):
        raise DjangoValidationError(rule.invalid_message)


def validate_document(value):
    """Model-field validator mirroring ``check_document`` for ``full_clean``."""
    _validate_field_file(value, TIMETABLE_DOCUMENTS)


def validate_lecture_note(value):
    _validate_field_file(value, LECTURE_NOTES)


class DocumentSizeLimitUploadHandler(FileUploadHandler):
    """Stops a multipart upload as soon as one file goes over the limit.

    Installed in front of Django's default handlers so the oversized body is
    never buffered or written to a temporary file.
    """

    def __init__(self, request=None, max_bytes=None):
        super().__init__(request)
        self.max_bytes = max_bytes if max_bytes is not None else document_max_bytes()
        self.received = 0
        self.exceeded = False

    def new_file(self, *args, **kwargs):
        self.received = 0
        super().new_file(*args, **kwargs)

    def receive_data_chunk(self, raw_data, start):
        self.received += len(raw_data)
        if self.received > self.max_bytes:
            self.exceeded = True
            logger.warning("upload %r stopped after %s bytes", self.file_name, self.received)
            raise StopUpload(connection_reset=False)
        return raw_data

    def file_complete(self, file_size):
        return None


def receive_upload(request, field, rule=TIMETABLE_DOCUMENTS, missing_message="Please upload a document"):
    """Read one multipart file from a DRF request through the gate.

    Must run before anything touches ``request.data`` or ``request.FILES``.
    """
    limiter = DocumentSizeLimitUploadHandler(request._request, max_bytes=rule.max_bytes)
    request.upload_handlers.insert(0, limiter)
    uploaded = request.FILES.get(field)
    if limiter.exceeded:
        raise DocumentTooLargeError()
    return check_document(uploaded, rule, missing_message)
