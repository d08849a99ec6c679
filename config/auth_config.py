"""
Authorization (claims) Service Configuration.

The workflow processor resolves the submitter's roles through an
external HTTP service; only the role intersection is evaluated here.

Exports:
    AuthConfig: Pydantic auth configuration model
"""

import json
import os
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from .defaults import AuthDefaults


class AuthConfig(BaseModel):
    """
    Claims collaborator configuration.
    """

    permission_url: Optional[str] = Field(
        default=None,
        description="Endpoint returning the role names of a user within a project group"
    )

    timeout_seconds: float = Field(
        default=AuthDefaults.TIMEOUT_SECONDS,
        gt=0,
        description="HTTP timeout for role lookups"
    )

    dev_roles: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="user -> roles mapping used when DEBUG_MODE is on and no permission_url is set"
    )

    def debug_dict(self) -> dict:
        return {
            "permission_url": self.permission_url,
            "timeout_seconds": self.timeout_seconds,
            "dev_role_users": sorted(self.dev_roles),
        }

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            permission_url=os.environ.get("AUTH_PERMISSION_URL"),
            timeout_seconds=float(os.environ.get("AUTH_TIMEOUT_SECONDS", str(AuthDefaults.TIMEOUT_SECONDS))),
            dev_roles=json.loads(os.environ.get("AUTH_DEV_ROLES") or "{}"),
        )
