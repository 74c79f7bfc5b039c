"""Explorer admin API client: mint per-node access credentials."""

import json
import logging
import os
from dataclasses import dataclass

import httpx

from envcompose.errors import ExternalServiceError
from envcompose.redact import register_secret

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_USERNAME = "username"
DEFAULT_ADMIN_PASSWORD = "password"


@dataclass
class NodeAccessKeys:
    """Credential record returned by the explorer for one registered node."""

    id: int | str
    access_key: str
    secret: str

    @classmethod
    def from_dict(cls, d: dict) -> "NodeAccessKeys":
        return cls(id=d.get("id", ""), access_key=d.get("accessKey", ""), secret=d.get("secret", ""))

    def to_dict(self) -> dict:
        return {"id": self.id, "accessKey": self.access_key, "secret": self.secret}


class ExplorerClient:
    """Thin async wrapper around the explorer's admin endpoints."""

    def __init__(self, base_url, username=DEFAULT_ADMIN_USERNAME, password=DEFAULT_ADMIN_PASSWORD, dry_run=False, timeout=60, verify=True):
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.dry_run = dry_run
        self.timeout = timeout
        self.verify = verify

    @classmethod
    def from_env(cls, base_url, dry_run=False) -> "ExplorerClient":
        """Client whose admin credentials come from EXPLORER_ADMIN_USERNAME / EXPLORER_ADMIN_PASSWORD."""
        return cls(
            base_url,
            username=os.environ.get("EXPLORER_ADMIN_USERNAME", DEFAULT_ADMIN_USERNAME),
            password=os.environ.get("EXPLORER_ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD),
            dry_run=dry_run,
        )

    async def _request(self, method, path, data):
        url = f"{self.base_url}{path}"
        if self.dry_run:
            logger.info(f"[dry-run] {method} {url}")
            logger.info(f"[dry-run] payload: {json.dumps(data)}")
            return None

        headers = {
            "x-explore-admin-username": self.username,
            "x-explore-admin-password": self.password,
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(verify=self.verify) as client:
                resp = await client.request(method, url, json=data, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError("explorer", f"{method} {path} returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError("explorer", f"{method} {path} failed: {e}") from e
        return resp.json()

    async def post_admin_nodes(self, node_label) -> NodeAccessKeys:
        """Register ``node_label`` with the explorer and return its access keys.

        POST /api/v1/admin/nodes
        """
        result = await self._request("POST", "/api/v1/admin/nodes", {"name": node_label})
        if result is None:  # dry-run
            return NodeAccessKeys(id=node_label, access_key=f"dry-run-{node_label}", secret="dry-run")
        keys = NodeAccessKeys.from_dict(result)
        register_secret(keys.secret)
        return keys
