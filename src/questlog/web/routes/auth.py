"""Auth routes - simulated login, sign-up and logout."""

import asyncio

from fastapi import APIRouter, Depends

from questlog.models import LoginForm, Notification, SignupForm
from questlog.session import Session, auth_delay
from questlog.web.deps import get_session

router = APIRouter(prefix="/auth")


@router.get("")
async def auth_status(session: Session = Depends(get_session)):
    return {"logged_in": session.is_logged_in, "user_id": session.user_id}


@router.post("/login")
async def login(form: LoginForm, session: Session = Depends(get_session)):
    # Sign-in is simulated; the delay stands in for the round trip
    await asyncio.sleep(auth_delay())
    state = session.login(form)
    return {"logged_in": True, "user_id": state.user_id}


@router.post("/signup", status_code=201)
async def signup(form: SignupForm, session: Session = Depends(get_session)):
    await asyncio.sleep(auth_delay())
    session.signup(form)
    return {
        "notification": Notification(
            title="Account created",
            description="You can now log in.",
        ),
    }


@router.post("/logout")
async def logout(session: Session = Depends(get_session)):
    session.logout()
    return {
        "logged_in": False,
        "notification": Notification(
            title="Logged out",
            description="You have been logged out successfully.",
        ),
    }
