"""Django project for the SmartLearn backend.

Settings, the root URL configuration and the WSGI entry point live here; the
API itself is the ``lms`` app.
"""
