"""Onboarding endpoints: new users set their first password with an emailed token"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from forms_admin.config import Settings, get_settings
from forms_admin.database import get_db
from forms_admin.middleware.rate_limit import get_rate_limit, limiter
from forms_admin.schemas.auth import CompleteOnboardingRequest, MessageResponse, OnboardingTokenRequest
from forms_admin.services.onboarding import OnboardingService

router = APIRouter(tags=["onboarding"])


@router.get("/verify-onboarding-token")
def verify_onboarding_token(
    token: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Check an onboarding link before showing the set-password form"""
    return OnboardingService(db, settings).verify_onboarding_token(token)


@router.post("/verify-onboarding-token")
def verify_onboarding_token_body(
    payload: OnboardingTokenRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return OnboardingService(db, settings).verify_onboarding_token(payload.token)


@router.post("/complete-onboarding", response_model=MessageResponse)
@limiter.limit(get_rate_limit("onboarding"))
def complete_onboarding(
    request: Request,
    payload: CompleteOnboardingRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Set the first password and activate the account. The token works once."""
    return OnboardingService(db, settings).complete_onboarding(payload.token, payload.password)
