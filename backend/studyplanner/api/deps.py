from typing import Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from studyplanner.core.security import decode_token
from studyplanner.db.session import get_db
from studyplanner.services.planner import ErrorKind, OperationResult, PlannerService
from studyplanner.services.pomodoro import PomodoroScheduler

bearer_scheme = HTTPBearer(auto_error=False)

ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PERSISTENCE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Owner id (the token subject) of the caller."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_token(credentials.credentials)
        owner_id = payload.get("sub")
        if not owner_id or payload.get("type") != "access":
            raise ValueError("Invalid token")
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    return str(owner_id)


def get_planner(
    request: Request,
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user),
) -> PlannerService:
    store = request.app.state.stores.get(current_user)
    return PlannerService(db, current_user, store)


def get_pomodoro(
    request: Request,
    current_user: str = Depends(get_current_user),
) -> PomodoroScheduler:
    return request.app.state.pomodoros.get(current_user)


def unwrap(result: OperationResult) -> Any:
    """Data of a successful result, or the matching HTTP error."""
    if not result.success:
        raise HTTPException(
            status_code=ERROR_STATUS.get(result.kind, status.HTTP_400_BAD_REQUEST),
            detail=result.error,
        )
    return result.data
