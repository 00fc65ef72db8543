from __future__ import annotations


class UpstreamServiceError(RuntimeError):
    """An external collaborator (blob store, OCR, datastore) failed."""

    status_code = 502

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service
        self.message = message
