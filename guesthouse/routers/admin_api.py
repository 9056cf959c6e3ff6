import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..limiter import limiter
from ..security import get_admin_password_hash, set_admin_password, verify_password
from ..services.admin_ops import AdminAction, SUCCESS_MESSAGES, perform_admin_action

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])

class AdminOperationIn(BaseModel):
    action: Optional[str] = None
    password: Optional[str] = None

class AdminPasswordIn(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)

def require_admin_password(db: Session, password: str):
    """Raises before anything is written when the password does not match the stored secret."""
    hashed = get_admin_password_hash(db)
    if not hashed:
        logger.error("No admin password stored in settings")
        raise HTTPException(status_code=500, detail="Failed to verify credentials")
    if not verify_password(password, hashed):
        raise HTTPException(status_code=401, detail="Incorrect password")

@router.post("/operations")
@limiter.limit(settings.RATE_LIMIT_ADMIN)
def api_admin_operation(request: Request, payload: AdminOperationIn, db: Session = Depends(get_db)):
    if not payload.action or not payload.password:
        raise HTTPException(status_code=400, detail="Missing required fields")
    try:
        action = AdminAction(payload.action)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid action")

    require_admin_password(db, payload.password)

    results = perform_admin_action(db, action)
    body = {
        "success": all(r.success for r in results),
        "results": [{"operation": r.operation, "success": r.success, "error": r.error} for r in results],
    }
    if body["success"]:
        logger.info("Admin operation %s completed", action.value)
        body["message"] = SUCCESS_MESSAGES[action]
        return body
    body["message"] = "; ".join(r.error for r in results if r.error)
    return JSONResponse(content=body, status_code=500)

@router.post("/password")
@limiter.limit(settings.RATE_LIMIT_ADMIN)
def api_admin_change_password(request: Request, payload: AdminPasswordIn, db: Session = Depends(get_db)):
    require_admin_password(db, payload.current_password)
    set_admin_password(db, payload.new_password)
    logger.info("Admin password changed")
    return {"success": True, "message": "Password updated successfully"}
