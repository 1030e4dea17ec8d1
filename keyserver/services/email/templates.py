"""Email templates for the verification and removal challenges."""
from dataclasses import dataclass
from urllib.parse import urlencode


@dataclass(frozen=True)
class EmailParams:
    """Values a challenge email is rendered from."""

    name: str
    email: str
    nonce: str
    key_id: str


@dataclass(frozen=True)
class EmailContent:
    """Rendered email."""

    subject: str
    text: str


def challenge_link(public_url: str, op: str, params: EmailParams) -> str:
    """Link to the confirmation endpoint of a challenge."""
    query = urlencode({"op": op, "keyId": params.key_id, "nonce": params.nonce})
    return f"{public_url.rstrip('/')}/api/v1/key?{query}"


def verify_key(params: EmailParams, public_url: str) -> EmailContent:
    """Render the email asking to confirm an uploaded key."""
    link = challenge_link(public_url, "verify", params)
    return EmailContent(
        subject="Verify Your Key",
        text=(
            f"Hello {params.name},\n\n"
            f"please click here to verify your email address {params.email}:\n\n"
            f"{link}\n\n"
            "Until you verify, your public key is not published on the key server "
            f"{public_url}.\n"
        ),
    )


def verify_remove(params: EmailParams, public_url: str) -> EmailContent:
    """Render the email asking to confirm the removal of a key."""
    link = challenge_link(public_url, "verifyRemove", params)
    return EmailContent(
        subject="Verify Key Removal",
        text=(
            f"Hello {params.name},\n\n"
            f"we have received a request to remove your public key for {params.email} "
            f"from the key server {public_url}.\n\n"
            f"To confirm the removal, please click here:\n\n{link}\n\n"
            "If you did not request this, you can ignore this message.\n"
        ),
    )
