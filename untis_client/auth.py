"""Credentials and login helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

ENV_SERVER = "UNTIS_SERVER"
ENV_SCHOOL = "UNTIS_SCHOOL"
ENV_USER = "UNTIS_USER"
ENV_PASSWORD = "UNTIS_PASSWORD"
# Sent as the "client" login parameter and as the HTTP User-Agent.
ENV_CLIENT = "UNTIS_CLIENT"


@dataclass(frozen=True)
class Credentials:
    server: str
    school: str
    username: str
    password: str = field(repr=False)
    user_agent: str = ""


def login_params(credentials: Credentials) -> Dict[str, str]:
    return {
        "user": credentials.username,
        "password": credentials.password,
        "client": credentials.user_agent,
    }


def credentials_from_env(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """Build credentials from ``UNTIS_*`` environment variables.

    ``UNTIS_CLIENT`` is optional; the others must be set and non-empty.
    """
    env = os.environ if environ is None else environ
    required = [ENV_SERVER, ENV_SCHOOL, ENV_USER, ENV_PASSWORD]
    missing = [name for name in required if not env.get(name)]
    if missing:
        raise RuntimeError(
            "Missing environment variables: " + ", ".join(missing)
        )
    return Credentials(
        server=env[ENV_SERVER],
        school=env[ENV_SCHOOL],
        username=env[ENV_USER],
        password=env[ENV_PASSWORD],
        user_agent=env.get(ENV_CLIENT, ""),
    )
