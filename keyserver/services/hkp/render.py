"""Rendering of HKP lookup results."""
import calendar
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import quote

from keyserver.services.hkp.search import Operation
from keyserver.services.lifecycle import PublishedKey

HKP_VERSION = 1

MR_GET_MEDIA_TYPE = "application/pgp-keys; charset=utf-8"
MR_GET_DISPOSITION = "attachment; filename=openpgpkey.asc"
TEXT_MEDIA_TYPE = "text/plain"

# gpg style algorithm letters for the human readable index.
ALGORITHM_LETTERS = {
    1: "R",
    2: "R",
    3: "R",
    16: "g",
    17: "D",
    18: "e",
    19: "E",
    22: "E",
}


@dataclass(frozen=True)
class Rendered:
    """Body and headers of an HKP response."""

    body: str
    media_type: str
    headers: dict[str, str] = field(default_factory=dict)


def render(operation: Operation, keys: list[PublishedKey], machine_readable: bool) -> Rendered:
    """Render the result of a lookup operation."""
    if operation is Operation.GET:
        return render_get(keys[0], machine_readable)
    if machine_readable:
        return Rendered(body=render_mr_index(keys), media_type=TEXT_MEDIA_TYPE)
    verbose = operation is Operation.VINDEX
    return Rendered(body=render_index(keys, verbose), media_type=TEXT_MEDIA_TYPE)


def render_get(key: PublishedKey, machine_readable: bool) -> Rendered:
    if machine_readable:
        return Rendered(
            body=key.record.armored,
            media_type=MR_GET_MEDIA_TYPE,
            headers={"Content-Disposition": MR_GET_DISPOSITION},
        )
    primary = key.primary_user_id
    comment = (
        f"# OpenPGP public key 0x{key.record.key_id}\n"
        f"# Fingerprint: {format_fingerprint(key.record.fingerprint)}\n"
        f"# User ID: {format_user_id(primary.name, primary.email)}\n"
    )
    return Rendered(body=f"{comment}\n{key.record.armored}", media_type=TEXT_MEDIA_TYPE)


def render_mr_index(keys: list[PublishedKey]) -> str:
    """
    Machine readable index.

    info:<version>:<count>
    pub:<fingerprint>:<algo>:<keylen>:<creationdate>::
    uid:<escaped uid string>:::
    """
    lines = [f"info:{HKP_VERSION}:{len(keys)}"]
    for key in keys:
        record = key.record
        lines.append(
            f"pub:{record.fingerprint}:{record.algorithm}:{_or_empty(record.key_size)}"
            f":{_or_empty(_timestamp(record))}::",
        )
        for uid in key.user_ids:
            escaped = quote(format_user_id(uid.name, uid.email), safe="!~*'()")
            lines.append(f"uid:{escaped}:::")
    return "\n".join(lines) + "\n"


def render_index(keys: list[PublishedKey], verbose: bool) -> str:
    """Human readable index, `verbose` lists every user id."""
    lines = []
    for key in keys:
        record = key.record
        primary = key.primary_user_id
        letter = ALGORITHM_LETTERS.get(record.algorithm, "?")
        created = record.created_at.strftime("%Y-%m-%d") if record.created_at else ""
        lines.append(
            f"pub  {_or_empty(record.key_size)}{letter}/{record.key_id} {created} "
            f"{format_user_id(primary.name, primary.email)}",
        )
        if verbose:
            lines.append(f"     Fingerprint={format_fingerprint(record.fingerprint)}")
            lines.extend(
                f"uid  {format_user_id(uid.name, uid.email)}" for uid in key.user_ids
            )
        lines.append("")
    return "\n".join(lines)


def format_user_id(name: str, email: str) -> str:
    if name:
        return f"{name} <{email}>"
    return f"<{email}>"


def format_fingerprint(fingerprint: str) -> str:
    return " ".join(fingerprint[i:i + 4] for i in range(0, len(fingerprint), 4))


def _timestamp(record) -> Optional[int]:
    if record.created_at is None:
        return None
    return calendar.timegm(record.created_at.utctimetuple())


def _or_empty(value: Optional[int]) -> str:
    return "" if value is None else str(value)
