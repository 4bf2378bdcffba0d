from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm

from predictsafe.db.session import SessionDep
from predictsafe.schemas import AuthResponse, RegisterRequest, RegisterResponse, SupabaseSession
from predictsafe.services.auth_service import auth_service

router = APIRouter()


@router.post("/register", response_model=RegisterResponse)
async def register(
    register_data: RegisterRequest,
    db: SessionDep
):
    """
    Register a new user with email and password.

    Creates the Supabase account and the local profile, assigns a random
    avatar and sends the welcome notification.

    Raises:
        HTTPException: If the passwords are invalid, the email is taken or Supabase refuses the sign-up
    """
    try:
        register_data.validate_passwords()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return await auth_service.register_user(db, register_data)


@router.post("/login", response_model=AuthResponse)
async def login(form_data: OAuth2PasswordRequestForm = Depends()):
    """
    Login endpoint that returns the Supabase session and user info.

    Args:
        form_data: OAuth2 password form containing username (email) and password

    Raises:
        HTTPException: If credentials are invalid
    """
    response = auth_service.authenticate_user(form_data.username, form_data.password)
    if not response:
        raise HTTPException(status_code=400, detail="Incorrect username or password")

    return response


@router.post("/refresh", response_model=SupabaseSession)
async def refresh_token(refresh_token: str):
    """
    Refresh access token using a valid refresh token.

    Raises:
        HTTPException: If refresh token is invalid or expired
    """
    try:
        new_tokens = auth_service.refresh_access_token(refresh_token)
    except Exception as e:
        raise HTTPException(status_code=401, detail=f"Failed to refresh token: {str(e)}")
    if not new_tokens:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    return new_tokens
