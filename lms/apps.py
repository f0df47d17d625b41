"""LMS app configuration (creates the upload directories on start)."""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class LmsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lms"
    verbose_name = "SmartLearn"

    def ready(self):
        from .uploads import ensure_upload_dirs

        try:
            paths = ensure_upload_dirs()
        except OSError as exc:
            logger.error("could not create upload directories: %s", exc)
        else:
            logger.debug("upload directories ready: %s", ", ".join(paths))
