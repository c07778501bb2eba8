from __future__ import annotations
import logging
import os
from typing import Optional, Sequence
from app.config import settings, Settings
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

logger = logging.getLogger(__name__)

# Calendar read/write (events + upcoming list) and Gmail send
ALL_SCOPES: Sequence[str] = (
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/gmail.send",
)

class GoogleAuth:
    def __init__(self, scopes: Sequence[str] = ALL_SCOPES, config: Optional[Settings] = None):
        """
        Credentials helper shared by the Calendar and Gmail clients.
        Inputs:
            scopes: Google API scope URLs.
            config: Settings to read client secret/token paths from (module settings by default).
        """
        cfg = config or settings
        self.scopes = list(scopes)
        self.client_path = cfg.google_client_secret_path
        self.token_path = cfg.google_token_path
        self._creds: Optional[Credentials] = None

    def creds(self) -> Credentials:
        """
        Return valid OAuth2 credentials, cached between calls.
        - Reuses the cached/saved token while valid.
        - Refreshes an expired token when a refresh token exists.
        - Otherwise runs the local OAuth2 flow and saves the new token.
        """
        c = self._creds
        if c is None and os.path.exists(self.token_path):
            c = Credentials.from_authorized_user_file(self.token_path, self.scopes)
        if not c or not c.valid:
            if c and c.expired and c.refresh_token:
                from google.auth.transport.requests import Request
                logger.info("Refreshing Google token")
                c.refresh(Request())
            else:
                logger.info("No usable Google token at %s, starting OAuth flow", self.token_path)
                flow = InstalledAppFlow.from_client_secrets_file(self.client_path, self.scopes)
                c = flow.run_local_server(port=0)
            with open(self.token_path, "w") as f:
                f.write(c.to_json())
        self._creds = c
        return c
