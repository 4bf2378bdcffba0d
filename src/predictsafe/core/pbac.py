import logging
import os
from typing import Dict, List

from fastapi import Depends, HTTPException, status
from pydantic import BaseModel
from yaml import safe_load

from predictsafe.api.auth_deps import SessionContext, get_session_context

logger = logging.getLogger(__name__)


# Load policies from YAML file
def load_policies() -> Dict:
    possible_paths = [
        os.getenv("POLICIES_FILE", "policies.yaml"),
        "/app/policies.yaml",  # Docker app directory
        os.path.join(os.path.dirname(__file__), "../../../policies.yaml"),  # Relative to this file
    ]
    for path in possible_paths:
        if os.path.exists(path):
            logger.debug(f"Loading policies from: {path}")
            with open(path, "r") as f:
                return safe_load(f) or {}

    logger.error(f"policies.yaml not found in any of these paths: {possible_paths}")
    return {}


class Policy(BaseModel):
    roles: List[str]
    actions: List[str]
    resources: List[str]


def check_policy(session: SessionContext, action: str, resource: str, policies: Dict | None = None) -> bool:
    """Check if the caller's roles allow action on resource."""
    if policies is None:
        policies = load_policies()

    for policy in policies.get("policies", []):
        policy_obj = Policy(**policy)

        if not any(role in session.roles for role in policy_obj.roles):
            continue
        if action not in policy_obj.actions:
            continue
        # "*" matches every resource
        if "*" not in policy_obj.resources and resource not in policy_obj.resources:
            continue

        logger.debug(f"Policy check passed for user {session.user_id}: {action} {resource}")
        return True

    logger.warning(f"No matching policy found for user {session.user_id}, action: {action}, resource: {resource}")
    return False


def require_permission(action: str, resource: str):
    """Dependency factory requiring a specific permission for an endpoint."""
    async def permission_dependency(
        session: SessionContext = Depends(get_session_context),
    ) -> SessionContext:
        if not check_policy(session, action, resource):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied"
            )
        return session

    return permission_dependency
