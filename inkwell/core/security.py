from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.concurrency import run_in_threadpool

from inkwell.core.firebase import verify_id_token

security_scheme = HTTPBearer()


@dataclass(frozen=True)
class AuthenticatedUser:
  """Identity resolved from a verified Firebase ID token."""

  uid: str
  email: str | None = None
  name: str | None = None


def _user_from_claims(decoded_claims: dict[str, Any]) -> AuthenticatedUser:
  firebase_uid = decoded_claims.get("uid")
  if not firebase_uid:
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token claims")

  email = decoded_claims.get("email")
  name = decoded_claims.get("name")
  return AuthenticatedUser(uid=str(firebase_uid), email=str(email) if email else None, name=str(name) if name else None)


async def get_current_user(token: Annotated[HTTPAuthorizationCredentials, Depends(security_scheme)]) -> AuthenticatedUser:
  """Verify the bearer token and return the caller identity used for session ownership."""
  # The Admin SDK verifies synchronously; keep it off the event loop.
  decoded_claims = await run_in_threadpool(verify_id_token, token.credentials)

  if not decoded_claims:
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication credentials", headers={"WWW-Authenticate": "Bearer"})

  return _user_from_claims(decoded_claims)
