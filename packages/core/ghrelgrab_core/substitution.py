"""Override maps for detected platform tokens (``--os-map`` / ``--arch-map``)."""

from __future__ import annotations


def split_pair(piece: str) -> tuple[str, str] | None:
    """Split one ``key=value`` fragment, or return ``None`` when it is unusable.

    Only the first ``=`` separates key from value. Fragments without ``=`` or
    with an empty side after trimming are dropped rather than reported.
    """
    key, sep, value = piece.partition("=")
    if not sep:
        return None
    key = key.strip()
    value = value.strip()
    if not key or not value:
        return None
    return key, value


def parse_subst_map(spec: str) -> dict[str, str]:
    """Parse ``"a=b,c=d"`` into ``{"a": "b", "c": "d"}``; later keys win."""
    out: dict[str, str] = {}
    if not spec:
        return out
    for piece in spec.split(","):
        piece = piece.strip()
        if not piece:
            continue
        pair = split_pair(piece)
        if pair is None:
            continue
        out[pair[0]] = pair[1]
    return out


def substitute(detected: str, spec: str) -> str:
    return parse_subst_map(spec).get(detected, detected)
