"""
Encoded polyline codec (precision 5).

Encoding
--------
1. Scale each coordinate by 1e5 and round half away from zero.
2. Delta-encode against the previous point (the first against 0, 0).
3. Zig-zag the signed delta: ``v << 1``, bit-inverted when ``v < 0``.
4. Emit 5-bit groups, least significant first; every group except the last
   is OR'd with 0x20, and each group is offset by 63 into printable ASCII.

The codec is lossy: ``decode(encode(p))`` matches ``p`` to within 1e-5
degrees per coordinate.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from .entities import GeoPoint
from .errors import MalformedPolyline, ValidationError

PRECISION = 1e5
_OFFSET = 63
_CONTINUATION = 0x20
_CHUNK_MASK = 0x1F


def _quantize(value: float) -> int:
    scaled = abs(value) * PRECISION
    rounded = int(scaled + 0.5)
    return -rounded if value < 0 else rounded


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks: list[str] = []
    while value >= _CONTINUATION:
        chunks.append(chr(((value & _CHUNK_MASK) | _CONTINUATION) + _OFFSET))
        value >>= 5
    chunks.append(chr(value + _OFFSET))
    return "".join(chunks)


def encode(points: Iterable[GeoPoint]) -> str:
    """Encode an ordered sequence of points.  Empty input -> ``""``."""
    out: list[str] = []
    prev_lat = prev_lng = 0
    for point in points:
        lat = _quantize(point.latitude)
        lng = _quantize(point.longitude)
        out.append(_encode_value(lat - prev_lat))
        out.append(_encode_value(lng - prev_lng))
        prev_lat, prev_lng = lat, lng
    return "".join(out)


def _iter_values(encoded: str) -> Iterator[int]:
    """Yield signed deltas; raise if the string ends inside a value."""
    result = shift = 0
    in_value = False
    for index, char in enumerate(encoded):
        b = ord(char) - _OFFSET
        if not 0 <= b <= _CHUNK_MASK | _CONTINUATION:
            raise MalformedPolyline(
                f"Invalid character {char!r} at position {index}"
            )
        result |= (b & _CHUNK_MASK) << shift
        shift += 5
        in_value = True
        if b < _CONTINUATION:
            yield ~(result >> 1) if result & 1 else result >> 1
            result = shift = 0
            in_value = False
    if in_value:
        raise MalformedPolyline("Encoded path ends in the middle of a value")


def decode(encoded: str) -> list[GeoPoint]:
    """
    Decode an encoded path back into points.

    Raises ``MalformedPolyline`` instead of returning partial data when the
    input is truncated, has an unpaired latitude, contains characters outside
    the codec alphabet, or decodes to coordinates off the globe.
    """
    values = list(_iter_values(encoded))
    if len(values) % 2:
        raise MalformedPolyline("Encoded path has a latitude without a longitude")

    points: list[GeoPoint] = []
    lat = lng = 0
    for dlat, dlng in zip(values[::2], values[1::2]):
        lat += dlat
        lng += dlng
        try:
            points.append(GeoPoint(lat / PRECISION, lng / PRECISION))
        except ValidationError as exc:
            raise MalformedPolyline(f"Decoded coordinate out of range: {exc}") from exc
    return points
