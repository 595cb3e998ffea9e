from fastapi import APIRouter, BackgroundTasks, Depends, Response, status

from ..database import SessionDep
from ..models import StatusMessage
from ..users.models import User
from ..users.schema import UserCreate, SignupResponse, UserPublic, PasswordResetRequest, PasswordUpdate
from ..users import service as user_service
from . import service as auth_service
from .dependencies import CurrentUser, MailerDep, OAuthClientDep, TokenServiceDep, oauth2_scheme
from .schema import LoginRequest, LoginResponse, AuthenticatedUser, SocialLoginRequest, SocialLoginResponse, SocialUser

router = APIRouter(tags=["auth"])


@router.post("/auth/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: UserCreate, db: SessionDep, mailer: MailerDep, background_tasks: BackgroundTasks):
    user = await user_service.create_user(body, db)
    background_tasks.add_task(auth_service.send_activation_mail, mailer, user)
    return SignupResponse(user=UserPublic.model_validate(user))


@router.post("/auth/login", response_model=LoginResponse)
async def login(body: LoginRequest, db: SessionDep, tokens: TokenServiceDep):
    user, token = await auth_service.authenticate_user(db, tokens, body.email, body.password)
    return LoginResponse(
        user=AuthenticatedUser(
            email=user.email,
            token=token,
            username=user.username,
            bio=user.bio,
            image=user.image,
        )
    )


@router.post("/auth/logout", response_model=StatusMessage)
async def logout(
    db: SessionDep,
    tokens: TokenServiceDep,
    token: str = Depends(oauth2_scheme),
    current_user: User = CurrentUser,
):
    await auth_service.logout(db, tokens, token)
    return StatusMessage(status=status.HTTP_200_OK, message="user logged out")


@router.post("/oauth/{provider}", response_model=SocialLoginResponse)
async def social_login(
    provider: str,
    body: SocialLoginRequest,
    db: SessionDep,
    tokens: TokenServiceDep,
    oauth: OAuthClientDep,
    mailer: MailerDep,
    background_tasks: BackgroundTasks,
    response: Response,
):
    profile = await oauth.fetch_profile(provider, body.access_token)
    user, token, created = await auth_service.social_login(db, tokens, profile)
    if created:
        background_tasks.add_task(auth_service.send_activation_mail, mailer, user)
        response.status_code = status.HTTP_201_CREATED
    return SocialLoginResponse(
        status=response.status_code or status.HTTP_200_OK,
        token=token,
        data=SocialUser.model_validate(user),
    )


@router.get("/activate/{user_id}", response_model=StatusMessage)
async def activate_account(user_id: int, db: SessionDep):
    await user_service.activate_user(user_id, db)
    return StatusMessage(status=status.HTTP_200_OK, message="Your account updated successfully")


@router.post("/users/reset", response_model=StatusMessage)
async def request_password_reset(
    body: PasswordResetRequest, db: SessionDep, tokens: TokenServiceDep, mailer: MailerDep
):
    await auth_service.request_password_reset(db, tokens, mailer, body.email)
    return StatusMessage(status=status.HTTP_200_OK, message="Reset email sent! check your email")


@router.post("/update_password/{token}", response_model=StatusMessage)
async def update_password(token: str, body: PasswordUpdate, db: SessionDep, tokens: TokenServiceDep):
    await auth_service.reset_password(db, tokens, token, body.password, body.password2)
    return StatusMessage(status=status.HTTP_200_OK, message="Password successfully updated")
