# api/routers/auth.py

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError
from sqlalchemy.engine import Connection

from skill_system.session import SessionContext

from .. import crud, schemas, security
from ..database import get_db

# This scheme will look for a token in the "Authorization" header.
# The `tokenUrl` points to our login endpoint.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

router = APIRouter(
    tags=["authentication"],
)


async def get_current_user(
    conn: Connection = Depends(get_db), token: str = Depends(oauth2_scheme)
) -> schemas.User:
    """
    Dependency to get the current user from a token.
    Decodes the token, validates the signature, and fetches the user from the DB.
    The role always comes from the database, never from the token.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        user_id = security.read_token_subject(token)
    except JWTError:
        raise credentials_exception

    user = crud.get_user(conn, user_id=user_id)
    if user is None or not user.is_active:
        raise credentials_exception
    return schemas.User.model_validate(user)


def get_session_context(
    current_user: schemas.User = Depends(get_current_user),
) -> SessionContext:
    """The verified identity and role handed to the core."""
    return security.session_context_for(current_user)


@router.post("/token", response_model=schemas.Token)
def login_for_access_token(
    conn: Connection = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends(),
):
    """
    Logs in a user and returns an access token.
    """
    user = crud.get_user_by_email(conn, email=form_data.username)

    if not user or not security.verify_password(
        form_data.password, user.hashed_password
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = security.create_access_token(user.id)

    return {"access_token": access_token, "token_type": "bearer"}
