"""
Catalog API

Public listing of portfolio projects and categories, and admin-only
create/update/delete endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from govivid.shared.auth import require_admin
from govivid.shared.context import ServerContext, get_context
from govivid.catalog.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    OkResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["catalog"])


# ──────────────────────────────────────────────────────────────────────────────
# Public endpoints (no auth required)
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/projects", response_model=list[ProjectResponse])
def list_projects(context: ServerContext = Depends(get_context)):
    """List all portfolio projects in stored order."""
    return context.catalog.list_projects()


@router.get("/categories", response_model=list[CategoryResponse])
def list_categories(context: ServerContext = Depends(get_context)):
    """List all project categories."""
    return context.catalog.list_categories()


# ──────────────────────────────────────────────────────────────────────────────
# Admin endpoints (x-admin-secret required)
# ──────────────────────────────────────────────────────────────────────────────

@router.post("/projects", response_model=ProjectResponse)
def create_project(
    project_data: ProjectCreate,
    admin: Optional[str] = Depends(require_admin),
    context: ServerContext = Depends(get_context),
):
    """Create a new project. The server assigns the id."""
    return context.catalog.create_project(project_data.model_dump())


@router.put("/projects/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: int,
    project_data: ProjectUpdate,
    admin: Optional[str] = Depends(require_admin),
    context: ServerContext = Depends(get_context),
):
    """Update only the provided fields of a project."""
    update_data = project_data.model_dump(exclude_unset=True)
    return context.catalog.update_project(project_id, update_data)


@router.delete("/projects/{project_id}", response_model=OkResponse)
def delete_project(
    project_id: int,
    admin: Optional[str] = Depends(require_admin),
    context: ServerContext = Depends(get_context),
):
    """Delete a project. Deleting an unknown id still succeeds."""
    context.catalog.delete_project(project_id)
    return OkResponse()


@router.post("/categories", response_model=CategoryResponse)
def create_category(
    category_data: CategoryCreate,
    admin: Optional[str] = Depends(require_admin),
    context: ServerContext = Depends(get_context),
):
    return context.catalog.create_category(category_data.value, category_data.label)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    admin: Optional[str] = Depends(require_admin),
    context: ServerContext = Depends(get_context),
):
    """
    Update a category. Changing its value moves every project in the old
    category to the new one.
    """
    return context.catalog.update_category(
        category_id,
        value=category_data.value,
        label=category_data.label,
    )


@router.delete("/categories/{category_id}", response_model=OkResponse)
def delete_category(
    category_id: int,
    admin: Optional[str] = Depends(require_admin),
    context: ServerContext = Depends(get_context),
):
    """Delete a category that no project uses."""
    context.catalog.delete_category(category_id)
    return OkResponse()
