from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from db import get_db
from routes.deps import get_session_context
from schemas.user_schema import (
    OtpValidateRequest,
    PendingVerificationOut,
    SessionMessage,
    SignInRequest,
)
from services import otp_authenticator
from services.session_context import SessionContext
from utils.exceptions import SessionExpired
from utils.mailer import Mailer, deliver_otp, get_mailer

router = APIRouter(
    prefix="/session",
    tags=["Authentication"]
)


def _dispatcher(background_tasks: BackgroundTasks, mailer: Mailer):
    """Queue delivery to run after the response; the request never waits on it."""
    def dispatch(address: str, code: str) -> None:
        background_tasks.add_task(deliver_otp, mailer, address, code)
    return dispatch


@router.post("", response_model=SessionMessage)
def request_code(
    payload: SignInRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    ctx: SessionContext = Depends(get_session_context),
    mailer: Mailer = Depends(get_mailer),
    db: Session = Depends(get_db),
):
    """Email a 6-digit code; creates the account on first sign-in."""
    user = otp_authenticator.request_code(
        db, ctx, payload.email, dispatch=_dispatcher(background_tasks, mailer)
    )
    ctx.write_to(request.session)
    return SessionMessage(
        message=f"We've sent a verification code to {user.email}",
        location="/session/verify",
    )


@router.get("/verify", response_model=PendingVerificationOut)
def verify(
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    user = otp_authenticator.pending_account(db, ctx)
    if not user:
        raise SessionExpired()
    return PendingVerificationOut(email=user.email, otp_sent_at=user.otp_sent_at)


@router.post("/validate_otp", response_model=SessionMessage)
def validate_otp(
    payload: OtpValidateRequest,
    request: Request,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    otp_authenticator.validate(db, ctx, payload.otp_code)
    ctx.write_to(request.session)
    return SessionMessage(message="Successfully signed in!", location="/dashboard")


@router.post("/resend_otp", response_model=SessionMessage)
def resend_otp(
    request: Request,
    background_tasks: BackgroundTasks,
    ctx: SessionContext = Depends(get_session_context),
    mailer: Mailer = Depends(get_mailer),
    db: Session = Depends(get_db),
):
    user = otp_authenticator.resend_code(db, ctx, dispatch=_dispatcher(background_tasks, mailer))
    ctx.write_to(request.session)
    return SessionMessage(
        message=f"A new verification code has been sent to {user.email}",
        location="/session/verify",
    )


@router.delete("", response_model=SessionMessage)
def sign_out(request: Request, ctx: SessionContext = Depends(get_session_context)):
    otp_authenticator.sign_out(ctx)
    ctx.write_to(request.session)
    return SessionMessage(message="You have been signed out", location="/session/new")
