"""HTTP surface of the ElderCare service."""

from eldercare.api.app import REQUEST_ID_HEADER, create_app

__all__ = ["create_app", "REQUEST_ID_HEADER"]
