"""
Value objects consumed by the Workly hierarchy engine.

Tasks, projects and goals arrive from the task/project/goal list endpoints
as plain dictionaries. This module turns them into small read-only
dataclasses so the engine can branch on typed fields, and renders them back
into dictionaries for API responses.

Nothing here owns persistence or id generation: every object is built at
call time from an externally fetched snapshot and discarded afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# ==================== Enumerations ====================

class HierarchyType(str, Enum):
    """How a task relates to projects and goals."""
    INDEPENDENT = "independent"          # No project, no goal
    PROJECT_ONLY = "project_only"        # Project set, goal unset
    GOAL_DIRECT = "goal_direct"          # Goal set directly, no project
    FULL_HIERARCHY = "full_hierarchy"    # Task -> project -> goal


class CPERStage(str, Enum):
    """Capture-Plan-Execute-Review lifecycle stage."""
    CAPTURED = "captured"
    PLANNED = "planned"
    EXECUTING = "executing"
    COMPLETED = "completed"
    REVIEWED = "reviewed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


def _coerce_enum(enum_cls, value):
    """Return the enum member for value, or the raw value if it is unknown."""
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _enum_value(value) -> Any:
    return value.value if isinstance(value, Enum) else value


# ==================== Workflow Data ====================

@dataclass(frozen=True)
class ExecutionData:
    """Execute-stage bookkeeping attached to a task's CPER workflow."""
    is_today: bool = False
    is_focused: bool = False
    started_at: Optional[str] = None
    paused_at: Optional[str] = None
    actual_time_spent: int = 0
    progress_notes: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict) -> 'ExecutionData':
        return cls(
            is_today=bool(data.get('is_today', False)),
            is_focused=bool(data.get('is_focused', False)),
            started_at=data.get('started_at'),
            paused_at=data.get('paused_at'),
            actual_time_spent=int(data.get('actual_time_spent') or 0),
            progress_notes=list(data.get('progress_notes') or [])
        )

    def to_dict(self) -> Dict:
        return {
            'is_today': self.is_today,
            'is_focused': self.is_focused,
            'started_at': self.started_at,
            'paused_at': self.paused_at,
            'actual_time_spent': self.actual_time_spent,
            'progress_notes': list(self.progress_notes)
        }


@dataclass(frozen=True)
class CPERWorkflowData:
    """Current CPER stage of a task plus the timestamps of each transition."""
    stage: CPERStage
    captured_at: Optional[str] = None
    planned_at: Optional[str] = None
    execution_started_at: Optional[str] = None
    completed_at: Optional[str] = None
    reviewed_at: Optional[str] = None
    execution_data: Optional[ExecutionData] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'CPERWorkflowData':
        execution = data.get('execution_data')
        if isinstance(execution, dict):
            execution = ExecutionData.from_dict(execution)
        return cls(
            stage=_coerce_enum(CPERStage, data.get('stage', CPERStage.CAPTURED)),
            captured_at=data.get('captured_at'),
            planned_at=data.get('planned_at'),
            execution_started_at=data.get('execution_started_at'),
            completed_at=data.get('completed_at'),
            reviewed_at=data.get('reviewed_at'),
            execution_data=execution
        )

    def to_dict(self) -> Dict:
        return {
            'stage': _enum_value(self.stage),
            'captured_at': self.captured_at,
            'planned_at': self.planned_at,
            'execution_started_at': self.execution_started_at,
            'completed_at': self.completed_at,
            'reviewed_at': self.reviewed_at,
            'execution_data': self.execution_data.to_dict() if self.execution_data else None
        }


# ==================== Entities ====================

@dataclass(frozen=True)
class WorklyTask:
    """
    A task as seen by the hierarchy engine.

    The hierarchy invariant (``full_hierarchy`` carries both ids,
    ``independent`` carries neither) is assumed, not checked. Tasks that
    break it still render, with placeholder labels for what is missing.
    """
    id: str
    title: str
    hierarchy_type: HierarchyType
    cper_workflow: CPERWorkflowData
    priority: TaskPriority = TaskPriority.MEDIUM
    estimated_minutes: int = 0
    project_id: Optional[str] = None
    goal_id: Optional[str] = None
    is_today: bool = False
    is_focused: bool = False
    next_action: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[str] = None
    actual_minutes: int = 0
    tags: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def stage(self):
        return self.cper_workflow.stage

    @property
    def has_next_action(self) -> bool:
        return bool(self.next_action and self.next_action.strip())

    @classmethod
    def from_dict(cls, data: Dict) -> 'WorklyTask':
        workflow = data.get('cper_workflow') or {}
        if isinstance(workflow, dict):
            workflow = CPERWorkflowData.from_dict(workflow)
        return cls(
            id=str(data['id']),
            title=data.get('title', ''),
            hierarchy_type=_coerce_enum(
                HierarchyType, data.get('hierarchy_type', HierarchyType.INDEPENDENT)
            ),
            cper_workflow=workflow,
            priority=_coerce_enum(TaskPriority, data.get('priority', TaskPriority.MEDIUM)),
            estimated_minutes=data.get('estimated_minutes') or 0,
            project_id=data.get('project_id'),
            goal_id=data.get('goal_id'),
            is_today=bool(data.get('is_today', False)),
            is_focused=bool(data.get('is_focused', False)),
            next_action=data.get('next_action'),
            description=data.get('description'),
            status=data.get('status'),
            due_date=data.get('due_date'),
            actual_minutes=data.get('actual_minutes') or 0,
            tags=list(data.get('tags') or []),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at')
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'title': self.title,
            'hierarchy_type': _enum_value(self.hierarchy_type),
            'project_id': self.project_id,
            'goal_id': self.goal_id,
            'cper_workflow': self.cper_workflow.to_dict(),
            'priority': _enum_value(self.priority),
            'estimated_minutes': self.estimated_minutes,
            'actual_minutes': self.actual_minutes,
            'is_today': self.is_today,
            'is_focused': self.is_focused,
            'next_action': self.next_action,
            'description': self.description,
            'status': self.status,
            'due_date': self.due_date,
            'tags': list(self.tags),
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }


@dataclass(frozen=True)
class Project:
    """Read-only project snapshot. ``goal_id`` is only known to some callers."""
    id: str
    title: str
    progress: float = 0
    tasks_count: int = 0
    goal_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'Project':
        return cls(
            id=str(data['id']),
            title=data.get('title', ''),
            progress=data.get('progress') or 0,
            tasks_count=data.get('tasks_count') or 0,
            goal_id=data.get('goal_id')
        )


@dataclass(frozen=True)
class Goal:
    """Read-only goal snapshot."""
    id: str
    title: str
    progress: float = 0
    project_count: int = 0

    @classmethod
    def from_dict(cls, data: Dict) -> 'Goal':
        return cls(
            id=str(data['id']),
            title=data.get('title', ''),
            progress=data.get('progress') or 0,
            project_count=data.get('project_count') or 0
        )


@dataclass(frozen=True)
class HierarchyChoice:
    """A proposed hierarchy for a task."""
    type: HierarchyType
    project_id: Optional[str] = None
    goal_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'HierarchyChoice':
        return cls(
            type=_coerce_enum(HierarchyType, data['type']),
            project_id=data.get('project_id'),
            goal_id=data.get('goal_id')
        )

    def to_dict(self) -> Dict:
        return {
            'type': _enum_value(self.type),
            'project_id': self.project_id,
            'goal_id': self.goal_id
        }


# ==================== Type Guards ====================

PROJECT_CONNECTED_TYPES = frozenset({HierarchyType.PROJECT_ONLY, HierarchyType.FULL_HIERARCHY})
GOAL_CONNECTED_TYPES = frozenset({HierarchyType.GOAL_DIRECT, HierarchyType.FULL_HIERARCHY})


def is_workly_task(obj: Any) -> bool:
    """True if a raw payload looks like a Workly task (typed hierarchy plus workflow)."""
    return (
        isinstance(obj, dict)
        and isinstance(obj.get('hierarchy_type'), str)
        and bool(obj.get('cper_workflow'))
    )


def is_independent_task(task: WorklyTask) -> bool:
    return task.hierarchy_type == HierarchyType.INDEPENDENT


def is_goal_connected_through_project(task: WorklyTask) -> bool:
    return task.hierarchy_type == HierarchyType.FULL_HIERARCHY


def is_directly_connected_to_goal(task: WorklyTask) -> bool:
    return task.hierarchy_type == HierarchyType.GOAL_DIRECT


def has_project_connection(task: WorklyTask) -> bool:
    return task.hierarchy_type in PROJECT_CONNECTED_TYPES


def has_goal_connection(task: WorklyTask) -> bool:
    return task.hierarchy_type in GOAL_CONNECTED_TYPES
