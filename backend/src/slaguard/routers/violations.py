from typing import Any, Dict

from fastapi import APIRouter, Depends

from slaguard.repositories.base import Repository
from slaguard.routers.deps import get_repository

router = APIRouter()


@router.get("/{violation_id}")
def get_violation(violation_id: str, repository: Repository = Depends(get_repository)) -> Dict[str, Any]:
    return repository.get_violation(violation_id).to_dict()
