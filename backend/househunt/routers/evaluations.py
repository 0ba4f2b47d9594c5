# backend/househunt/routers/evaluations.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..auth import get_auth_session, get_backend
from ..clients import AuthSession, Backend
from ..schemas import EligibilityOut, HomeEvaluation
from ..services import evaluations as svc

router = APIRouter(prefix="/homes/{home_id}/evaluation", tags=["evaluation"])


@router.get("", response_model=HomeEvaluation)
def get_evaluation(home_id: str, session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    return svc.fetch_evaluation(backend, session=session, home_id=home_id)


@router.put("", response_model=HomeEvaluation)
def save_evaluation(
    home_id: str,
    payload: HomeEvaluation,
    session: AuthSession = Depends(get_auth_session),
    backend: Backend = Depends(get_backend),
):
    try:
        return svc.save_evaluation(backend, session=session, home_id=home_id, evaluation=payload)
    except svc.EvaluationSaveError as e:
        status = 400 if e.error.is_validation else 502
        raise HTTPException(
            status_code=status,
            detail={
                "message": str(e),
                "code": e.error.code,
                "failed": e.failed,
                "saved": e.saved,
                "skipped": e.skipped,
            },
        )


@router.get("/eligibility", response_model=EligibilityOut)
def eligibility(home_id: str, session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    return svc.home_eligibility(backend, session=session, home_id=home_id)
