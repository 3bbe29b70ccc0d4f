from __future__ import annotations


class ToiletCheckError(Exception):
    """Base error for ToiletCheck."""


class TokenError(ToiletCheckError):
    """Bearer token is malformed, expired or missing a subject."""


class QrCodeError(ToiletCheckError):
    """Scanned QR payload does not identify a location."""


class InspectionWriteError(ToiletCheckError):
    """Inspection and its components could not be written together."""


class DatabaseError(ToiletCheckError):
    """Database layer failure."""
