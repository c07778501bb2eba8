import base64
import logging
from typing import Optional
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from app.config import settings, Settings
from app.errors import EmailError
from app.services.google_auth import GoogleAuth

logger = logging.getLogger(__name__)

class GmailClient:
    def __init__(self, auth: GoogleAuth, config: Optional[Settings] = None):
        """
        Gmail API client wrapper.
        Inputs:
            auth: GoogleAuth instance used to retrieve valid credentials.
            config: Settings (sender address, dry_run); module settings by default.
        """
        self._auth = auth
        self._cfg = config or settings

    def _svc(self):
        """Build a Gmail API service object using authorized credentials."""
        return build("gmail", "v1", credentials=self._auth.creds())

    def send_email(self, to: str, subject: str, body: str) -> None:
        """
        Send a plain-text email using the Gmail API.
        Inputs:
            to: recipient address.
            subject: subject line.
            body: plain-text body.
        Raises:
            EmailError if the sender is not configured or the API call fails.
        """
        if self._cfg.dry_run:
            logger.info("[dry-run] email to %s | %s\n%s", to, subject, body)
            return
        if not self._cfg.gmail_from:
            raise EmailError("GMAIL_FROM not set")

        msg = f"From: {self._cfg.gmail_from}\nTo: {to}\nSubject: {subject}\n\n{body}"
        raw = base64.urlsafe_b64encode(msg.encode()).decode()
        try:
            sent = self._svc().users().messages().send(userId="me", body={"raw": raw}).execute()
        except HttpError as e:
            raise EmailError(str(e)) from e
        logger.info("Sent email to %s (id=%s)", to, sent.get("id"))
