# ================================
# DEPENDENCIES (dependencies.py)
# ================================

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
import uuid

from app.core.database import get_db
from app.core.security import verify_token
from app.core.exceptions import AuthenticationError, Unauthorized
from app.models.profile import Profile
from app.services.notification_service import Notifier, notifier

# Fehlender Header soll 401 liefern, nicht 403
security = HTTPBearer(auto_error=False)

# ================================
# BASIC DEPENDENCIES
# ================================

def get_notifier() -> Notifier:
    """Dependency für den Notifier (in Tests überschrieben)"""
    return notifier

# ================================
# PROFILE AUTHENTICATION DEPENDENCIES
# ================================

async def get_current_profile(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Profile:
    """Dependency für das aktuelle Profil aus dem Bearer Token"""
    if not credentials:
        raise AuthenticationError("Not authenticated")

    payload = verify_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid authentication credentials")

    profile_id = payload.get("sub")
    if not profile_id:
        raise AuthenticationError("Invalid token payload")

    try:
        profile_uuid = uuid.UUID(str(profile_id))
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    profile = db.query(Profile).filter(Profile.id == profile_uuid).first()
    if not profile or not profile.is_active:
        raise AuthenticationError("Profile not found or inactive")

    return profile

# ================================
# ROLE DEPENDENCIES
# ================================

def require_role(*roles: str):
    """Dependency Factory für Rollen-Checks"""

    async def role_dependency(
        current_profile: Profile = Depends(get_current_profile)
    ) -> Profile:
        if current_profile.role not in roles:
            raise Unauthorized(f"Requires role: {' or '.join(roles)}")
        return current_profile

    return role_dependency

get_admin_profile = require_role("admin")
get_agent_profile = require_role("agent")
get_customer_profile = require_role("customer")
