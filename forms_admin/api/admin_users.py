"""Admin user administration API (session required)"""
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from forms_admin.api.deps import get_mailer, require_admin_session
from forms_admin.config import Settings, get_settings
from forms_admin.database import get_db
from forms_admin.middleware.rate_limit import get_rate_limit, limiter
from forms_admin.schemas.admin_user import AdminUserCreate, AdminUserResponse, AdminUserStatusUpdate, AdminUserUpdate
from forms_admin.services.user_management import UserManagementService
from forms_admin.utils.logger import logger
from forms_admin.utils.mailer import Mailer

router = APIRouter(
    prefix="/admin/users",
    tags=["admin-users"],
    dependencies=[Depends(require_admin_session)],
)


def _serialize(user) -> dict:
    return AdminUserResponse.model_validate(user).model_dump(by_alias=True, mode="json")


@router.get("")
@limiter.limit(get_rate_limit("admin_api"))
def list_users(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> List[dict]:
    """List all admin accounts, newest first"""
    return [_serialize(user) for user in UserManagementService(db, settings).list_users()]


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("admin_api"))
def create_user(
    request: Request,
    payload: AdminUserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: Mailer = Depends(get_mailer),
):
    """
    Create an inactive account with an onboarding link.

    The raw onboarding URL is returned once; pass ``shouldSendEmail`` to also
    email it to the new user.
    """
    created = UserManagementService(db, settings).create_user(
        payload.first_name, payload.last_name, payload.email, payload.role
    )

    email_sent = False
    if payload.should_send_email:
        email_sent = mailer.send_reset_email(created.user.email, created.onboarding_url, is_onboarding=True)
        logger.info(
            "Onboarding email requested",
            extra={"admin_user_id": created.user.id, "action": "sent" if email_sent else "logged"},
        )

    return {
        "success": True,
        "user": _serialize(created.user),
        "onboardingUrl": created.onboarding_url,
        "emailSent": email_sent,
    }


@router.put("/{user_id}")
@limiter.limit(get_rate_limit("admin_api"))
def update_user(
    request: Request,
    user_id: int,
    payload: AdminUserUpdate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = UserManagementService(db, settings).update_user(
        user_id, payload.first_name, payload.last_name, payload.email, payload.role
    )
    return {"success": True, "user": _serialize(user)}


@router.post("/{user_id}/toggle")
@limiter.limit(get_rate_limit("admin_api"))
def toggle_user_status(
    request: Request,
    user_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    is_active = UserManagementService(db, settings).toggle_user_status(user_id)
    return {"success": True, "isActive": is_active}


@router.post("/{user_id}/set-status")
@limiter.limit(get_rate_limit("admin_api"))
def set_user_status(
    request: Request,
    user_id: int,
    payload: AdminUserStatusUpdate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Activate or deactivate an account; ``shouldUnfreeze`` also lifts a freeze"""
    user = UserManagementService(db, settings).set_user_status(user_id, payload.is_active, payload.should_unfreeze)
    return {"success": True, "user": _serialize(user)}


@router.post("/{user_id}/unfreeze")
@limiter.limit(get_rate_limit("admin_api"))
def unfreeze_user(
    request: Request,
    user_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Lift a freeze and reset the failed-login counter"""
    user = UserManagementService(db, settings).unfreeze_user(user_id)
    return {"success": True, "user": _serialize(user)}
