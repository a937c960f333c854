"""Compressed eszip container format.

Layout::

    b"EZBR" | brotli(eszip bytes)

The 4-byte tag lets the platform tell a compressed bundle from a plain
eszip. The raw bundle is streamed through the brotli encoder in chunks so
large bundles are never duplicated in memory more than once.
"""

import io
from typing import BinaryIO, Union

import brotli

from fndeploy.core.errors import CompressionError

ESZIP_CONTENT_TYPE = "application/vnd.denoland.eszip"
COMPRESSED_ESZIP_MAGIC = b"EZBR"

_CHUNK_SIZE = 64 * 1024


def wrap_stream(source: BinaryIO, sink: BinaryIO) -> None:
    """Write the magic tag then the brotli-compressed contents of `source`."""
    sink.write(COMPRESSED_ESZIP_MAGIC)
    try:
        compressor = brotli.Compressor()
        while True:
            chunk = source.read(_CHUNK_SIZE)
            if not chunk:
                break
            sink.write(compressor.process(chunk))
        sink.write(compressor.finish())
    except brotli.error as exc:
        raise CompressionError(str(exc), cause=exc) from exc
    except OSError as exc:
        raise CompressionError(f"stream copy failed: {exc}", cause=exc) from exc


def wrap(raw: Union[bytes, bytearray, memoryview]) -> bytes:
    """Return `raw` as a compressed eszip container."""
    sink = io.BytesIO()
    wrap_stream(io.BytesIO(bytes(raw)), sink)
    return sink.getvalue()


def unwrap(body: bytes) -> bytes:
    """Inverse of wrap(). Raises CompressionError on a bad tag or stream."""
    if body[:4] != COMPRESSED_ESZIP_MAGIC:
        raise CompressionError(f"missing {COMPRESSED_ESZIP_MAGIC!r} tag")
    try:
        return brotli.decompress(body[4:])
    except brotli.error as exc:
        raise CompressionError(str(exc), cause=exc) from exc
