import structlog
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from firebase_admin import auth, exceptions
from pydantic import BaseModel

from api.errors import UnauthorizedError
from libs.firebase.client import initialize_firebase_app

logger = structlog.get_logger(__name__)


class User(BaseModel):
    uid: str
    email: str | None = None


# auto_error=False so missing and non-Bearer headers both arrive as None
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def get_current_user(request: Request, token: str | None = Depends(oauth2_scheme)) -> User:
    if not token:
        raise UnauthorizedError("Unauthorized")

    initialize_firebase_app()
    try:
        decoded_token = auth.verify_id_token(token)
    except (ValueError, exceptions.FirebaseError) as e:
        logger.info("Token verification failed", error_type=type(e).__name__)
        raise UnauthorizedError("Invalid authentication token")
    except Exception as e:
        # Any other verification failure still rejects the caller
        logger.warning("Unexpected token verification error", error_type=type(e).__name__, exc_info=True)
        raise UnauthorizedError("Invalid authentication token")

    user = User(uid=decoded_token["uid"], email=decoded_token.get("email"))
    request.state.user = user
    return user
