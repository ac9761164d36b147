"""
Job role API endpoints: roles and the ranked job titles mapped to them
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import async_sessionmaker
from typing import List, Optional

from backoffice.database import get_session_factory
from backoffice.schemas.rota import (
    JobRoleCreate,
    JobRoleResponse,
    ReorderRequest,
    RoleMappingCreate,
    RoleMappingResponse,
)
from backoffice.services.role_mapping import COMMON_JOB_TITLES, RoleMappingService

router = APIRouter()


def get_role_mapping_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> RoleMappingService:
    return RoleMappingService(session_factory)


@router.get("/", response_model=List[JobRoleResponse])
async def list_job_roles(
    location_id: int,
    service: RoleMappingService = Depends(get_role_mapping_service),
):
    return await service.list_roles(location_id)


@router.post("/", response_model=JobRoleResponse)
async def create_job_role(
    data: JobRoleCreate,
    service: RoleMappingService = Depends(get_role_mapping_service),
):
    return await service.create_role(data.model_dump())


@router.get("/common-titles", response_model=List[str])
async def list_common_job_titles():
    return COMMON_JOB_TITLES


@router.get("/mappings", response_model=List[RoleMappingResponse])
async def list_role_mappings(
    location_id: int,
    role_id: Optional[int] = None,
    service: RoleMappingService = Depends(get_role_mapping_service),
):
    return await service.list_mappings(location_id, role_id)


@router.delete("/mappings/{mapping_id}")
async def delete_role_mapping(
    mapping_id: int,
    service: RoleMappingService = Depends(get_role_mapping_service),
):
    await service.delete_mapping(mapping_id)
    return {"message": "Job title removed"}


@router.post("/{role_id}/mappings", response_model=RoleMappingResponse)
async def add_job_title(
    role_id: int,
    data: RoleMappingCreate,
    service: RoleMappingService = Depends(get_role_mapping_service),
):
    return await service.add_job_title(data.location_id, role_id, data.job_title)


@router.post("/{role_id}/reorder", response_model=List[RoleMappingResponse])
async def reorder_job_titles(
    role_id: int,
    data: ReorderRequest,
    service: RoleMappingService = Depends(get_role_mapping_service),
):
    return await service.reorder_role(data.location_id, role_id, data.from_index, data.to_index)
