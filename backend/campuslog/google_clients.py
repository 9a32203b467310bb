"""
CampusLog Backend — Google API Client Construction
====================================================

What:  Loads service-account credentials and builds the Sheets v4 and Drive v3
       discovery clients.
Why:   Clients are built once at startup and handed to the stores that use
       them, instead of every route module authenticating on import.
How:   Credentials come from GOOGLE_CREDENTIALS (inline JSON, for hosted
       deployments) or GOOGLE_CREDENTIALS_FILE (local development).
"""

import json
import logging
from typing import Any, Callable, Tuple

import google_auth_httplib2
import httplib2
from google.oauth2 import service_account
from googleapiclient.discovery import build

from campuslog.config import Settings

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


def load_credentials(settings: Settings) -> service_account.Credentials:
    """Inline JSON takes precedence over the key file."""
    if settings.google_credentials:
        info = json.loads(settings.google_credentials)
        logger.info("Using inline service-account credentials (%s)", info.get("client_email"))
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)

    logger.info("Using service-account key file %s", settings.google_credentials_file)
    return service_account.Credentials.from_service_account_file(
        settings.google_credentials_file, scopes=SCOPES
    )


def build_google_resources(credentials: service_account.Credentials) -> Tuple[Any, Any]:
    """Returns (sheets, drive) discovery resources."""
    # Why cache_discovery=False: the file cache needs oauth2client, which is not
    # installed, and only logs a warning on every build
    sheets = build("sheets", "v4", credentials=credentials, cache_discovery=False)
    drive = build("drive", "v3", credentials=credentials, cache_discovery=False)
    return sheets, drive


def authorized_http_factory(credentials: service_account.Credentials) -> Callable[[], Any]:
    """
    httplib2.Http is not thread-safe, and blocking calls run in a threadpool,
    so every request gets its own authorised Http object.
    """

    def factory() -> google_auth_httplib2.AuthorizedHttp:
        return google_auth_httplib2.AuthorizedHttp(credentials, http=httplib2.Http())

    return factory
