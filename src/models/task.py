"""Task models."""

from enum import Enum
from typing import Optional
from datetime import date
from pydantic import BaseModel, Field


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskRelation(BaseModel):
    """Weak back-reference to the entity that spawned the task."""
    type: str = Field(..., description="contact, property, deal, visit, contract")
    id: str = Field(..., min_length=1)


class Task(BaseModel):
    """Task model."""
    id: Optional[str] = None
    agency_id: str = Field(..., description="Owning agency (tenant) ID")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    due_date: Optional[date] = Field(None, description="Due date")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    status: TaskStatus = Field(default=TaskStatus.TODO)
    assigned_to: Optional[str] = Field(None, description="Assignee")
    related_to: Optional[TaskRelation] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
