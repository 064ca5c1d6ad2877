from typing import Any, Dict

from fastapi import APIRouter, Depends

from slaguard.config import Settings
from slaguard.repositories.base import Repository
from slaguard.routers.deps import get_app_settings, get_repository
from slaguard.services.assessment import run_assessment_pass

router = APIRouter()


@router.post("/run")
def run_assessment(
    repository: Repository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """Run one assessment pass synchronously and return its summary."""
    return run_assessment_pass(settings, repository).to_dict()
