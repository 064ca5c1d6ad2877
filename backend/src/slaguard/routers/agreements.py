"""
Agreement management API router.

Provides:
- Agreement CRUD and generation from templates
- Lifecycle transitions (start, stop, terminate)
- Violations recorded for an agreement
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import BaseModel, Field

from slaguard.assessment.lifecycle import transition
from slaguard.config import Settings
from slaguard.generator import generate
from slaguard.models import Agreement, State
from slaguard.repositories.base import Repository
from slaguard.routers.deps import get_app_settings, get_repository

router = APIRouter()


class GenerationRequest(BaseModel):
    """Request model for generating an agreement from a template."""
    template: Dict[str, Any]
    variables: Dict[str, Any] = Field(default_factory=dict)


@router.get("")
def list_agreements(
    state: Optional[List[State]] = Query(default=None),
    repository: Repository = Depends(get_repository),
) -> List[Dict[str, Any]]:
    if state:
        agreements = repository.get_agreements_by_state(*state)
    else:
        agreements = repository.get_all_agreements()
    return [a.to_dict() for a in agreements]


@router.get("/{agreement_id}")
def get_agreement(agreement_id: str, repository: Repository = Depends(get_repository)) -> Dict[str, Any]:
    return repository.get_agreement(agreement_id).to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_agreement(
    payload: Dict[str, Any] = Body(...),
    repository: Repository = Depends(get_repository),
) -> Dict[str, Any]:
    return repository.create_agreement(Agreement.from_dict(payload)).to_dict()


@router.post("/generate", status_code=status.HTTP_201_CREATED)
def generate_agreement(
    body: GenerationRequest,
    repository: Repository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    agreement = generate(body.template, body.variables, external_ids=settings.external_ids)
    return repository.create_agreement(agreement).to_dict()


@router.put("/{agreement_id}")
def update_agreement(
    agreement_id: str,
    payload: Dict[str, Any] = Body(...),
    repository: Repository = Depends(get_repository),
) -> Dict[str, Any]:
    repository.get_agreement(agreement_id)
    agreement = Agreement.from_dict({**payload, "id": agreement_id})
    return repository.update_agreement(agreement).to_dict()


@router.delete("/{agreement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_agreement(agreement_id: str, repository: Repository = Depends(get_repository)) -> None:
    repository.delete_agreement(agreement_id)


def _change_state(repository: Repository, agreement_id: str, new_state: State) -> Dict[str, Any]:
    agreement = repository.get_agreement(agreement_id)
    transition(agreement, new_state, metadata={"source": "api"})
    return repository.update_agreement_state(agreement_id, new_state).to_dict()


@router.put("/{agreement_id}/start")
def start_agreement(agreement_id: str, repository: Repository = Depends(get_repository)) -> Dict[str, Any]:
    return _change_state(repository, agreement_id, State.STARTED)


@router.put("/{agreement_id}/stop")
def stop_agreement(agreement_id: str, repository: Repository = Depends(get_repository)) -> Dict[str, Any]:
    return _change_state(repository, agreement_id, State.STOPPED)


@router.put("/{agreement_id}/terminate")
def terminate_agreement(agreement_id: str, repository: Repository = Depends(get_repository)) -> Dict[str, Any]:
    return _change_state(repository, agreement_id, State.TERMINATED)


@router.get("/{agreement_id}/violations")
def list_agreement_violations(
    agreement_id: str,
    repository: Repository = Depends(get_repository),
) -> List[Dict[str, Any]]:
    repository.get_agreement(agreement_id)
    return [v.to_dict() for v in repository.get_violations_by_agreement(agreement_id)]
