"""
Pydantic schemas for the portfolio catalog API.

Defines request/response models for projects and categories.
"""
from typing import Optional
from pydantic import BaseModel, Field


class ProjectBase(BaseModel):
    """Base schema with common project fields."""
    title: str = ""
    category: str = ""
    description: str = ""
    image: str = ""
    tags: list[str] = Field(default_factory=list)
    link: str = ""
    github: str = ""


class ProjectCreate(ProjectBase):
    """Schema for creating a new project. Any id in the body is ignored."""
    pass


class ProjectUpdate(BaseModel):
    """Schema for updating a project. All fields optional."""
    title: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    tags: Optional[list[str]] = None
    link: Optional[str] = None
    github: Optional[str] = None


class ProjectResponse(ProjectBase):
    id: int


class CategoryCreate(BaseModel):
    # Optional so missing fields get our own 400 message instead of a validation error
    value: Optional[str] = None
    label: Optional[str] = None


class CategoryUpdate(BaseModel):
    value: Optional[str] = None
    label: Optional[str] = None


class CategoryResponse(BaseModel):
    id: int
    value: str
    label: str


class OkResponse(BaseModel):
    ok: bool = True
