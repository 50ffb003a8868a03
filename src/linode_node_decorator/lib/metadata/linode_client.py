"""
linode_client.py
- Blocking client for the Linode Metadata Service (http://169.254.169.254/v1).
- Manages its own metadata token: requested on first use, reused until shortly before expiry.
- fetch() returns a Snapshot of /v1/instance or raises MetadataError.
"""

import time

import requests
from loguru import logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from linode_node_decorator import __version__
from linode_node_decorator.core.constants import (
    DEFAULT_METADATA_BASE_URL,
    DEFAULT_METADATA_TIMEOUT,
    DEFAULT_TOKEN_EXPIRY,
    TOKEN_REFRESH_MARGIN,
    TOKEN_RETRY_ATTEMPTS,
    TOKEN_RETRY_WAIT,
)
from linode_node_decorator.core.errors import MetadataError
from linode_node_decorator.core.models import Snapshot

USER_AGENT = f"linode-node-decorator/{__version__}"


class LinodeMetadataClient:
    def __init__(
        self,
        base_url=DEFAULT_METADATA_BASE_URL,
        token_expiry=DEFAULT_TOKEN_EXPIRY,
        timeout=DEFAULT_METADATA_TIMEOUT,
        session=None,
        clock=time.monotonic,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_expiry = token_expiry
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        self._clock = clock
        self._token = None
        self._token_deadline = 0.0

    # --- Token Management ---
    def _token_valid(self):
        return self._token is not None and self._clock() < self._token_deadline

    def invalidate_token(self):
        self._token = None
        self._token_deadline = 0.0

    @retry(
        stop=stop_after_attempt(TOKEN_RETRY_ATTEMPTS),
        wait=wait_fixed(TOKEN_RETRY_WAIT),
        retry=retry_if_exception_type(MetadataError),
        reraise=True,
    )
    def _request_token(self):
        url = f"{self.base_url}/v1/token"
        try:
            resp = self.session.put(
                url,
                headers={"Metadata-Token-Expiry-Seconds": str(self.token_expiry)},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"[metadata] Token request failed: {e}")
            raise MetadataError(f"failed to obtain metadata token: {e}") from e

        token = resp.text.strip()
        if not token:
            raise MetadataError("metadata service returned an empty token")
        return token

    def token(self):
        """Return a valid metadata token, requesting a new one if needed."""
        if not self._token_valid():
            self._token = self._request_token()
            margin = min(TOKEN_REFRESH_MARGIN, self.token_expiry // 2)
            self._token_deadline = self._clock() + self.token_expiry - margin
            logger.debug(f"[metadata] Obtained new metadata token (expires in {self.token_expiry}s)")
        return self._token

    # --- Instance Data ---
    def get_instance(self):
        """GET /v1/instance and return the decoded JSON body."""
        url = f"{self.base_url}/v1/instance"
        try:
            resp = self.session.get(
                url,
                headers={"Metadata-Token": self.token(), "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise MetadataError(f"failed to reach metadata service: {e}") from e

        if resp.status_code == 401:
            # token revoked or expired early; next call will request a fresh one
            self.invalidate_token()
            raise MetadataError("metadata token rejected (401)")

        try:
            resp.raise_for_status()
            return resp.json()
        except requests.HTTPError as e:
            raise MetadataError(f"metadata service error: {e}") from e
        except ValueError as e:
            raise MetadataError(f"metadata service returned invalid JSON: {e}") from e

    def fetch(self):
        return Snapshot.from_api(self.get_instance())
