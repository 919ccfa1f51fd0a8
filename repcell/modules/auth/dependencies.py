"""
Dependencias de autenticación para FastAPI.

Los tokens los emite el servicio de autenticación; aquí solo se validan y se
convierten en un AuthContext.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt

from repcell.core.config import settings
from repcell.modules.auth.schemas import AuthContext, UserRole

# Security scheme
security = HTTPBearer()


def get_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthContext:
    """Decode the bearer token into the caller's context."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudieron validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.APP_SECRET_STRING,
            algorithms=[settings.ALGORITHM]
        )
        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        role = payload.get("role")
        user_role = UserRole(role) if role else None
    except (jwt.PyJWTError, ValueError):
        raise credentials_exception

    return AuthContext(user_id=str(user_id), user_role=user_role)


def require_roles(*roles: UserRole):
    """Dependency factory: the caller must hold one of the given roles."""
    allowed = set(roles)

    def checker(auth_context: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if auth_context.user_role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permisos insuficientes"
            )
        return auth_context

    return checker


require_admin = require_roles(UserRole.ADMIN)
