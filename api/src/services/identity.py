"""
Identity Resolution

Maps a signed-in user's email to the agent code name their report data
is stored under.
"""

# Email local-part (lower-case) -> agent code name
DEFAULT_AGENT_EMAIL_MAP: dict[str, str] = {
    "lovely": "LOVELY",
    "jhe": "JHE",
    "kyrie": "KYRIE",
    "primo": "PRIMO",
    "cu": "CU",
    "mar": "MAR",
    "ken": "KEN",
    "kel": "KEL",
}


def resolve_agent_name(email: str, overrides: dict[str, str] | None = None) -> str:
    """
    Derive the agent identity for an email address.

    The local-part is matched case-insensitively against the mapping table
    (overrides win over the defaults). Unmapped local-parts fall back to
    their upper-cased form.

    Args:
        email: User email, e.g. "Lovely@example.com"
        overrides: Extra local-part -> agent name mappings

    Returns:
        Agent identity, e.g. "LOVELY"

    Raises:
        ValueError: If the email has an empty local-part
    """
    prefix = email.split("@")[0].strip().lower()
    if not prefix:
        raise ValueError(f"Cannot derive agent identity from email: {email!r}")

    mapping = {**DEFAULT_AGENT_EMAIL_MAP, **(overrides or {})}
    return mapping.get(prefix, prefix.upper())
