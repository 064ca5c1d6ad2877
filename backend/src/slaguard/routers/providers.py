"""Provider management API router."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from slaguard.models import Provider
from slaguard.repositories.base import Repository
from slaguard.routers.deps import get_repository

router = APIRouter()


class ProviderCreate(BaseModel):
    """Request model for creating a provider."""
    id: str = ""
    name: str


@router.get("")
def list_providers(repository: Repository = Depends(get_repository)) -> List[Dict[str, Any]]:
    return [p.to_dict() for p in repository.get_all_providers()]


@router.get("/{provider_id}")
def get_provider(provider_id: str, repository: Repository = Depends(get_repository)) -> Dict[str, Any]:
    return repository.get_provider(provider_id).to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_provider(body: ProviderCreate, repository: Repository = Depends(get_repository)) -> Dict[str, Any]:
    created = repository.create_provider(Provider(id=body.id, name=body.name))
    return created.to_dict()


@router.delete("/{provider_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_provider(provider_id: str, repository: Repository = Depends(get_repository)) -> None:
    repository.delete_provider(provider_id)
