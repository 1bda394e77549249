from __future__ import annotations

import io
import threading
from typing import BinaryIO

from resource_loader.exceptions import IllegalResourceStateError

from .base import AbstractResource


class InputStreamResource(AbstractResource):
    """Resource wrapping an already-open binary stream.

    The stream can be handed out exactly once; ``is_open()`` is True so
    callers know not to read it twice. Prefer BytesResource or a
    location-based resource whenever the content must be re-read.
    """

    def __init__(self, stream: BinaryIO, description: str | None = None):
        if stream is None:
            raise ValueError("stream must not be None")
        self._stream = stream
        self._description = description or ""
        self._read = False
        self._lock = threading.Lock()

    @property
    def description(self) -> str:
        return f"InputStream resource [{self._description}]"

    def exists(self) -> bool:
        return True

    def is_open(self) -> bool:
        return True

    def get_input_stream(self) -> BinaryIO:
        with self._lock:
            if self._read:
                raise IllegalResourceStateError(
                    "InputStream has already been read - do not use InputStreamResource "
                    "if a stream needs to be read multiple times"
                )
            self._read = True
        return self._stream

    def __eq__(self, other: object) -> bool:
        return self is other or (
            isinstance(other, InputStreamResource) and other._stream is self._stream
        )

    def __hash__(self) -> int:
        return id(self._stream)


class BytesResource(AbstractResource):
    """In-memory resource over a bytes object; can be read any number of times."""

    def __init__(self, data: bytes, description: str | None = None):
        self._data = bytes(data)
        self._description = description or "resource loaded from byte array"

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def description(self) -> str:
        return f"Byte array resource [{self._description}]"

    def exists(self) -> bool:
        return True

    def content_length(self) -> int:
        return len(self._data)

    def get_input_stream(self) -> BinaryIO:
        return io.BytesIO(self._data)

    def get_content_as_bytes(self) -> bytes:
        return self._data

    def __eq__(self, other: object) -> bool:
        return self is other or (isinstance(other, BytesResource) and other._data == self._data)

    def __hash__(self) -> int:
        return hash(self._data)
