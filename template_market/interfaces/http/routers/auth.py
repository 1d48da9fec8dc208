"""Authentication endpoints for marketplace accounts."""
from fastapi import APIRouter, Depends, HTTPException, status

from template_market.interfaces.http.deps import get_account_service, get_current_account
from template_market.modules.accounts import (
    Account,
    AccountAlreadyExistsError,
    AccountCreateInput,
    AccountService,
    InvalidRefreshTokenError,
)
from template_market.schemas import (
    AccountResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    SuccessResponse,
    TokenResponse,
)

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED, summary="Create an account")
async def register(
    payload: RegisterRequest,
    account_service: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    try:
        account, tokens = await account_service.register(
            AccountCreateInput(username=payload.username, email=payload.email, password=payload.password)
        )
    except AccountAlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered") from exc

    return RegisterResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        account=AccountResponse.model_validate(account),
    )


@router.post("/login", response_model=TokenResponse, summary="Exchange credentials for tokens")
async def login(
    payload: LoginRequest,
    account_service: AccountService = Depends(get_account_service),
) -> TokenResponse:
    tokens = await account_service.login(payload.email, payload.password)
    if tokens is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return TokenResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


@router.post("/refresh", response_model=TokenResponse, summary="Rotate the refresh token")
async def refresh(
    payload: RefreshRequest,
    account_service: AccountService = Depends(get_account_service),
) -> TokenResponse:
    try:
        tokens = await account_service.refresh(payload.refresh_token)
    except InvalidRefreshTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    return TokenResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


@router.post("/logout", response_model=SuccessResponse, summary="Revoke the stored refresh token")
async def logout(
    account: Account = Depends(get_current_account),
    account_service: AccountService = Depends(get_account_service),
) -> SuccessResponse:
    await account_service.logout(account.id)
    return SuccessResponse(message="Logged out")


@router.get("/me", response_model=AccountResponse, summary="Current account")
async def me(account: Account = Depends(get_current_account)) -> AccountResponse:
    return AccountResponse.model_validate(account)
