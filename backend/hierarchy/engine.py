"""
Hierarchy classification and contribution scoring for Workly tasks.

Workly lets a task stand alone or hang off a project, a goal, or a project
that itself serves a goal. This module answers the questions the UI asks
about that structure:

- Where does a task sit? (a readable path such as "Launch v2 > Backend")
- May its hierarchy be changed right now?
- How much does it contribute to its project and goal, and how
  self-contained is it?
- How should today's executing tasks be bucketed and grouped?

Contribution Formulas:
---------------------
project_contribution = 100 / max(tasks_count, 1)
                       * priority_weight
                       * min(estimated_minutes / 480, 2)

goal_contribution    = 100 / max(project_count * 3, 1) * priority_weight   (direct)
                       100 / max(project_count * 10, 1) * priority_weight  (via project)

Both are clamped to 0-100. They are advisory estimates, so every ratio
guards its denominator instead of raising.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .entities import (
    CPERStage,
    Goal,
    GOAL_CONNECTED_TYPES,
    HierarchyChoice,
    HierarchyType,
    Project,
    PROJECT_CONNECTED_TYPES,
    TaskPriority,
    WorklyTask,
)

logger = logging.getLogger(__name__)


# ==================== Error Codes ====================

class ErrorCode(Enum):
    """Error codes shared by the engine and the API responses."""
    SUCCESS = "SUCCESS"
    ERR_INVALID_PAYLOAD = "ERR_INVALID_PAYLOAD"
    ERR_EMPTY_TASKS = "ERR_EMPTY_TASKS"
    ERR_HIERARCHY_LOCKED = "ERR_HIERARCHY_LOCKED"
    ERR_HIERARCHY_MISMATCH = "ERR_HIERARCHY_MISMATCH"


class HierarchyValidationError(Exception):
    """Raised when a hierarchy change is blocked by a validation error."""

    def __init__(
        self,
        errors: List[str],
        warnings: Optional[List[str]] = None,
        code: ErrorCode = ErrorCode.ERR_HIERARCHY_LOCKED
    ):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        self.code = code
        super().__init__(f"Hierarchy change rejected: {', '.join(self.errors)}")

    def to_dict(self) -> Dict:
        return {
            'error_code': self.code.value,
            'message': str(self),
            'errors': self.errors,
            'warnings': self.warnings
        }


# ==================== Labels & Messages ====================

INDEPENDENT_LABEL = "Independent task"
PROJECT_PLACEHOLDER = "Project unresolved"
GOAL_PLACEHOLDER = "Goal unresolved"
UNKNOWN_LABEL = "Unknown"

MSG_COMPLETED_LOCKED = "Completed tasks cannot change their hierarchy."
MSG_EXECUTING_CAUTION = "This task is being executed; change its hierarchy with care."
MSG_FOCUSED_TO_INDEPENDENT = (
    "Making the focused task independent can affect tracked project progress."
)
MSG_PROJECT_GOAL_MISMATCH = "The selected project does not belong to the selected goal."
MSG_STRUCTURE_SUGGESTION = (
    "Placing an independent task in a hierarchy makes progress toward goals easier to trace."
)
MSG_MOVE_TO_PROJECT = (
    "This task is expected to take more than 2 hours; consider managing it as a project."
)
MSG_CONNECT_TO_GOAL = (
    "This is a high-priority task; connect it to a goal to track goal progress."
)
MSG_BECOME_INDEPENDENT = (
    "This task looks self-contained; consider simplifying it to an independent task."
)


# ==================== Result Objects ====================

@dataclass
class HierarchyValidation:
    """Outcome of a proposed hierarchy change. Only errors block."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'is_valid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'suggestions': list(self.suggestions)
        }


@dataclass
class ProjectConnection:
    project_id: str
    project_title: str
    project_progress: float
    contribution_percentage: float

    def to_dict(self) -> Dict:
        return {
            'project_id': self.project_id,
            'project_title': self.project_title,
            'project_progress': self.project_progress,
            'contribution_percentage': round(self.contribution_percentage, 2)
        }


@dataclass
class GoalConnection:
    goal_id: str
    goal_title: str
    goal_progress: float
    contribution_percentage: float
    is_direct_connection: bool

    def to_dict(self) -> Dict:
        return {
            'goal_id': self.goal_id,
            'goal_title': self.goal_title,
            'goal_progress': self.goal_progress,
            'contribution_percentage': round(self.contribution_percentage, 2),
            'is_direct_connection': self.is_direct_connection
        }


@dataclass
class HierarchyImpact:
    independence: float = 0.0
    on_project: Optional[float] = None
    on_goal: Optional[float] = None

    def to_dict(self) -> Dict:
        result = {'independence': self.independence}
        if self.on_project is not None:
            result['on_project'] = round(self.on_project, 2)
        if self.on_goal is not None:
            result['on_goal'] = round(self.on_goal, 2)
        return result


@dataclass
class HierarchyRecommendations:
    should_move_to_project: Optional[str] = None
    should_connect_to_goal: Optional[str] = None
    should_become_independent: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            key: value for key, value in (
                ('should_move_to_project', self.should_move_to_project),
                ('should_connect_to_goal', self.should_connect_to_goal),
                ('should_become_independent', self.should_become_independent),
            )
            if value
        }


@dataclass
class HierarchyAnalytics:
    """Per-task snapshot of hierarchy connections, impact and advice."""
    task_id: str
    hierarchy_type: HierarchyType
    project_connection: Optional[ProjectConnection] = None
    goal_connection: Optional[GoalConnection] = None
    impact: HierarchyImpact = field(default_factory=HierarchyImpact)
    recommendations: HierarchyRecommendations = field(default_factory=HierarchyRecommendations)

    def to_dict(self) -> Dict:
        connections = {}
        if self.project_connection:
            connections['project_connection'] = self.project_connection.to_dict()
        if self.goal_connection:
            connections['goal_connection'] = self.goal_connection.to_dict()
        return {
            'task_id': self.task_id,
            'hierarchy_type': getattr(self.hierarchy_type, 'value', self.hierarchy_type),
            'connections': connections,
            'impact': self.impact.to_dict(),
            'recommendations': self.recommendations.to_dict()
        }


@dataclass
class ProjectTaskGroup:
    project_id: str
    project_title: str
    tasks: List[WorklyTask] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'project_id': self.project_id,
            'project_title': self.project_title,
            'tasks': [task.to_dict() for task in self.tasks]
        }


@dataclass
class GoalTaskGroup:
    goal_id: str
    goal_title: str
    direct_tasks: List[WorklyTask] = field(default_factory=list)
    project_tasks: List[ProjectTaskGroup] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'goal_id': self.goal_id,
            'goal_title': self.goal_title,
            'direct_tasks': [task.to_dict() for task in self.direct_tasks],
            'project_tasks': [group.to_dict() for group in self.project_tasks]
        }


@dataclass
class GroupedByHierarchy:
    independent: List[WorklyTask] = field(default_factory=list)
    by_project: List[ProjectTaskGroup] = field(default_factory=list)
    by_goal: List[GoalTaskGroup] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'independent': [task.to_dict() for task in self.independent],
            'by_project': [group.to_dict() for group in self.by_project],
            'by_goal': [group.to_dict() for group in self.by_goal]
        }


@dataclass
class TimeAnalysis:
    total_estimated_minutes: float = 0
    focused_tasks_minutes: float = 0
    average_task_minutes: float = 0.0
    recommended_daily_limit: int = 480

    @property
    def remaining_minutes(self) -> float:
        return self.recommended_daily_limit - self.total_estimated_minutes

    @property
    def is_over_limit(self) -> bool:
        return self.total_estimated_minutes > self.recommended_daily_limit

    def to_dict(self) -> Dict:
        return {
            'total_estimated_minutes': self.total_estimated_minutes,
            'focused_tasks_minutes': self.focused_tasks_minutes,
            'average_task_minutes': round(self.average_task_minutes, 2),
            'recommended_daily_limit': self.recommended_daily_limit,
            'remaining_minutes': self.remaining_minutes,
            'is_over_limit': self.is_over_limit
        }


@dataclass
class TodayTasksOptimized:
    """
    Today view of executing tasks.

    ``focused_tasks``, ``urgent_tasks`` and ``today_tasks`` never share a
    task. ``ready_to_start_tasks`` is a cross-cutting view of every task with
    a next action and can repeat tasks from the other buckets;
    ``exclusive_ready_to_start_tasks`` is the disjoint reading.
    """
    focused_tasks: List[WorklyTask] = field(default_factory=list)
    urgent_tasks: List[WorklyTask] = field(default_factory=list)
    today_tasks: List[WorklyTask] = field(default_factory=list)
    ready_to_start_tasks: List[WorklyTask] = field(default_factory=list)
    grouped_by_hierarchy: GroupedByHierarchy = field(default_factory=GroupedByHierarchy)
    time_analysis: TimeAnalysis = field(default_factory=TimeAnalysis)

    @property
    def exclusive_ready_to_start_tasks(self) -> List[WorklyTask]:
        return [
            task for task in self.ready_to_start_tasks
            if not task.is_focused and task.priority != TaskPriority.URGENT
        ]

    def to_dict(self) -> Dict:
        return {
            'focused_tasks': [task.to_dict() for task in self.focused_tasks],
            'urgent_tasks': [task.to_dict() for task in self.urgent_tasks],
            'today_tasks': [task.to_dict() for task in self.today_tasks],
            'ready_to_start_tasks': [task.to_dict() for task in self.ready_to_start_tasks],
            'exclusive_ready_to_start_tasks': [
                task.to_dict() for task in self.exclusive_ready_to_start_tasks
            ],
            'grouped_by_hierarchy': self.grouped_by_hierarchy.to_dict(),
            'time_analysis': self.time_analysis.to_dict()
        }


# Lookup tables
PRIORITY_WEIGHTS = {
    TaskPriority.URGENT: 2.0,
    TaskPriority.HIGH: 1.5,
    TaskPriority.MEDIUM: 1.0,
    TaskPriority.LOW: 0.7
}

INDEPENDENCE_SCORES = {
    HierarchyType.INDEPENDENT: 100,
    HierarchyType.PROJECT_ONLY: 30,
    HierarchyType.GOAL_DIRECT: 20,
    HierarchyType.FULL_HIERARCHY: 0
}


class HierarchyManager:
    """
    Pure functions over Workly tasks, projects and goals.

    The manager holds no state beyond its constants; every method takes the
    objects it needs and returns fresh results without touching its inputs.
    """

    # Time weighting
    WORKDAY_MINUTES = 480  # Baseline for time weight and daily limit
    MAX_TIME_WEIGHT = 2.0

    # Assumed tasks per project-equivalent slot under a goal
    DIRECT_TASKS_PER_PROJECT = 3
    TASKS_PER_PROJECT = 10

    # Recommendation thresholds
    LONG_TASK_MINUTES = 120
    SIMPLIFY_INDEPENDENCE_THRESHOLD = 80

    DEFAULT_PRIORITY_WEIGHT = 1.0
    UNKNOWN_INDEPENDENCE = 50

    # ------------------------------------------------------------------
    # Path formatting
    # ------------------------------------------------------------------

    def get_hierarchy_path(
        self,
        task: WorklyTask,
        project: Optional[Project] = None,
        goal: Optional[Goal] = None
    ) -> str:
        """
        Build a readable hierarchy path for a task.

        Examples: "Launch v2 > Backend", "Backend", "Independent task".
        Missing projects or goals fall back to placeholder labels.
        """
        hierarchy_type = task.hierarchy_type
        project_title = project.title if project and project.title else PROJECT_PLACEHOLDER
        goal_title = goal.title if goal and goal.title else GOAL_PLACEHOLDER

        if hierarchy_type == HierarchyType.INDEPENDENT:
            return INDEPENDENT_LABEL
        if hierarchy_type == HierarchyType.PROJECT_ONLY:
            return project_title
        if hierarchy_type == HierarchyType.GOAL_DIRECT:
            return goal_title
        if hierarchy_type == HierarchyType.FULL_HIERARCHY:
            return f"{goal_title} > {project_title}"
        return UNKNOWN_LABEL

    # ------------------------------------------------------------------
    # Change validation
    # ------------------------------------------------------------------

    def can_change_hierarchy(
        self,
        task: WorklyTask,
        new_hierarchy: HierarchyChoice,
        projects: Optional[Iterable[Project]] = None
    ) -> HierarchyValidation:
        """
        Check whether a task may move to a new hierarchy.

        Rules:
        - Completed tasks are locked (error).
        - Executing tasks may move, with a warning.
        - Moving the focused task to independent warns about project progress.
        - Moving out of independent earns a suggestion.
        - For a full hierarchy target, a project known to belong to another
          goal is an error. Projects that are not supplied, or carry no
          goal id, are not checked.
        """
        errors: List[str] = []
        warnings: List[str] = []
        suggestions: List[str] = []
        stage = task.cper_workflow.stage

        if stage == CPERStage.EXECUTING:
            warnings.append(MSG_EXECUTING_CAUTION)

        if stage == CPERStage.COMPLETED:
            errors.append(MSG_COMPLETED_LOCKED)

        if (new_hierarchy.type == HierarchyType.FULL_HIERARCHY
                and new_hierarchy.project_id and new_hierarchy.goal_id
                and projects is not None):
            owner_goal = self._find_project_goal(new_hierarchy.project_id, projects)
            if owner_goal is not None and owner_goal != new_hierarchy.goal_id:
                errors.append(MSG_PROJECT_GOAL_MISMATCH)

        if new_hierarchy.type == HierarchyType.INDEPENDENT:
            execution = task.cper_workflow.execution_data
            if execution is not None and execution.is_focused:
                warnings.append(MSG_FOCUSED_TO_INDEPENDENT)

        if (task.hierarchy_type == HierarchyType.INDEPENDENT
                and new_hierarchy.type != HierarchyType.INDEPENDENT):
            suggestions.append(MSG_STRUCTURE_SUGGESTION)

        return HierarchyValidation(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            suggestions=suggestions
        )

    @staticmethod
    def _find_project_goal(project_id: str, projects: Iterable[Project]) -> Optional[str]:
        for project in projects:
            if project.id == project_id:
                return project.goal_id
        return None

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def get_priority_weight(self, priority) -> float:
        return PRIORITY_WEIGHTS.get(priority, self.DEFAULT_PRIORITY_WEIGHT)

    def calculate_time_weight(self, estimated_minutes: float) -> float:
        """Estimated effort relative to an 8-hour day, capped at 2x."""
        return min(max(estimated_minutes, 0) / self.WORKDAY_MINUTES, self.MAX_TIME_WEIGHT)

    def calculate_project_contribution(self, task: WorklyTask, project: Project) -> float:
        """
        Estimate the share of a project this task accounts for (0-100).

        An even split over the project's tasks, scaled by priority and by
        how much of a workday the task takes.
        """
        base = 100 / max(project.tasks_count, 1)
        score = (
            base
            * self.get_priority_weight(task.priority)
            * self.calculate_time_weight(task.estimated_minutes)
        )
        return _clamp(score)

    def calculate_goal_contribution(self, task: WorklyTask, goal: Goal) -> float:
        """
        Estimate the share of a goal this task accounts for (0-100).

        Direct goal tasks compete with roughly three tasks per project slot;
        tasks reached through a project compete with roughly ten.
        """
        if task.hierarchy_type == HierarchyType.GOAL_DIRECT:
            base = 100 / max(goal.project_count * self.DIRECT_TASKS_PER_PROJECT, 1)
        else:
            base = 100 / max(goal.project_count * self.TASKS_PER_PROJECT, 1)
        return _clamp(base * self.get_priority_weight(task.priority))

    def calculate_independence_score(self, task: WorklyTask) -> float:
        return INDEPENDENCE_SCORES.get(task.hierarchy_type, self.UNKNOWN_INDEPENDENCE)

    def analyze_hierarchy(
        self,
        task: WorklyTask,
        project: Optional[Project] = None,
        goal: Optional[Goal] = None
    ) -> HierarchyAnalytics:
        """Compute connections, impact and recommendations for one task."""
        analysis = HierarchyAnalytics(task_id=task.id, hierarchy_type=task.hierarchy_type)

        if project is not None and task.project_id:
            analysis.project_connection = ProjectConnection(
                project_id=project.id,
                project_title=project.title,
                project_progress=project.progress,
                contribution_percentage=self.calculate_project_contribution(task, project)
            )
            analysis.impact.on_project = analysis.project_connection.contribution_percentage

        if goal is not None:
            analysis.goal_connection = GoalConnection(
                goal_id=goal.id,
                goal_title=goal.title,
                goal_progress=goal.progress,
                contribution_percentage=self.calculate_goal_contribution(task, goal),
                is_direct_connection=task.hierarchy_type == HierarchyType.GOAL_DIRECT
            )
            analysis.impact.on_goal = analysis.goal_connection.contribution_percentage

        analysis.impact.independence = self.calculate_independence_score(task)
        analysis.recommendations = self.generate_recommendations(task, analysis)
        return analysis

    def generate_recommendations(
        self,
        task: WorklyTask,
        analysis: HierarchyAnalytics
    ) -> HierarchyRecommendations:
        recommendations = HierarchyRecommendations()

        if (task.hierarchy_type == HierarchyType.INDEPENDENT
                and task.estimated_minutes > self.LONG_TASK_MINUTES):
            recommendations.should_move_to_project = MSG_MOVE_TO_PROJECT

        if (task.hierarchy_type == HierarchyType.PROJECT_ONLY
                and task.priority == TaskPriority.HIGH):
            recommendations.should_connect_to_goal = MSG_CONNECT_TO_GOAL

        # Full-hierarchy tasks always score 0 independence, so this only
        # fires if the independence table changes.
        if (task.hierarchy_type == HierarchyType.FULL_HIERARCHY
                and analysis.impact.independence > self.SIMPLIFY_INDEPENDENCE_THRESHOLD):
            recommendations.should_become_independent = MSG_BECOME_INDEPENDENT

        return recommendations

    # ------------------------------------------------------------------
    # Today view
    # ------------------------------------------------------------------

    def optimize_today_tasks(
        self,
        tasks: Iterable[WorklyTask],
        projects: Iterable[Project] = (),
        goals: Iterable[Goal] = ()
    ) -> TodayTasksOptimized:
        """
        Bucket and group today's executing tasks.

        Only tasks marked for today and in the executing stage take part.
        Input order is preserved inside every bucket and group.
        """
        projects_by_id = {project.id: project for project in projects}
        goals_by_id = {goal.id: goal for goal in goals}

        active = [
            task for task in tasks
            if task.is_today and task.cper_workflow.stage == CPERStage.EXECUTING
        ]

        focused = [task for task in active if task.is_focused]
        urgent = [
            task for task in active
            if task.priority == TaskPriority.URGENT and not task.is_focused
        ]
        ready = [task for task in active if task.has_next_action]
        remaining = [
            task for task in active
            if not task.is_focused
            and task.priority != TaskPriority.URGENT
            and not task.has_next_action
        ]

        grouped = GroupedByHierarchy(
            independent=[
                task for task in active
                if task.hierarchy_type == HierarchyType.INDEPENDENT
            ],
            by_project=self._group_by_project(active, projects_by_id),
            by_goal=self._group_by_goal(active, projects_by_id, goals_by_id)
        )

        total_minutes = sum(task.estimated_minutes for task in active)
        time_analysis = TimeAnalysis(
            total_estimated_minutes=total_minutes,
            focused_tasks_minutes=sum(task.estimated_minutes for task in focused),
            average_task_minutes=total_minutes / max(len(active), 1),
            recommended_daily_limit=self.WORKDAY_MINUTES
        )

        logger.debug(
            "today_tasks_optimized active=%d focused=%d urgent=%d ready=%d remaining=%d minutes=%s",
            len(active), len(focused), len(urgent), len(ready), len(remaining), total_minutes
        )
        if time_analysis.is_over_limit:
            logger.info(
                "today_tasks_over_limit minutes=%s limit=%s",
                total_minutes, self.WORKDAY_MINUTES
            )

        return TodayTasksOptimized(
            focused_tasks=focused,
            urgent_tasks=urgent,
            today_tasks=remaining,
            ready_to_start_tasks=ready,
            grouped_by_hierarchy=grouped,
            time_analysis=time_analysis
        )

    def _group_by_project(
        self,
        tasks: List[WorklyTask],
        projects_by_id: Dict[str, Project]
    ) -> List[ProjectTaskGroup]:
        groups: Dict[str, ProjectTaskGroup] = {}

        for task in tasks:
            if not task.project_id or task.hierarchy_type not in PROJECT_CONNECTED_TYPES:
                continue
            if task.project_id not in groups:
                groups[task.project_id] = ProjectTaskGroup(
                    project_id=task.project_id,
                    project_title=_project_title(projects_by_id.get(task.project_id))
                )
            groups[task.project_id].tasks.append(task)

        return list(groups.values())

    def _group_by_goal(
        self,
        tasks: List[WorklyTask],
        projects_by_id: Dict[str, Project],
        goals_by_id: Dict[str, Goal]
    ) -> List[GoalTaskGroup]:
        groups: Dict[str, GoalTaskGroup] = {}
        nested: Dict[str, Dict[str, ProjectTaskGroup]] = {}

        for task in tasks:
            if not task.goal_id or task.hierarchy_type not in GOAL_CONNECTED_TYPES:
                continue

            goal_id = task.goal_id
            if goal_id not in groups:
                goal = goals_by_id.get(goal_id)
                groups[goal_id] = GoalTaskGroup(
                    goal_id=goal_id,
                    goal_title=goal.title if goal and goal.title else GOAL_PLACEHOLDER
                )
                nested[goal_id] = {}

            if task.hierarchy_type == HierarchyType.GOAL_DIRECT:
                groups[goal_id].direct_tasks.append(task)
            elif task.project_id:
                project_groups = nested[goal_id]
                if task.project_id not in project_groups:
                    project_groups[task.project_id] = ProjectTaskGroup(
                        project_id=task.project_id,
                        project_title=_project_title(projects_by_id.get(task.project_id))
                    )
                project_groups[task.project_id].tasks.append(task)

        for goal_id, group in groups.items():
            group.project_tasks = list(nested[goal_id].values())

        return list(groups.values())

    # ------------------------------------------------------------------
    # Change execution
    # ------------------------------------------------------------------

    def change_hierarchy(
        self,
        task_id: str,
        new_hierarchy: HierarchyChoice,
        current_task: WorklyTask,
        reference_time: Optional[datetime] = None,
        projects: Optional[Iterable[Project]] = None
    ) -> WorklyTask:
        """
        Validate and apply a hierarchy change, returning the updated task.

        The result is not persisted; callers write it back through the task
        update endpoint.

        Raises:
            HierarchyValidationError: if the validator reports any error.
        """
        validation = self.can_change_hierarchy(current_task, new_hierarchy, projects)
        if not validation.is_valid:
            code = (
                ErrorCode.ERR_HIERARCHY_MISMATCH
                if MSG_PROJECT_GOAL_MISMATCH in validation.errors
                and MSG_COMPLETED_LOCKED not in validation.errors
                else ErrorCode.ERR_HIERARCHY_LOCKED
            )
            logger.warning(
                "hierarchy_change_rejected task_id=%s target=%s errors=%d",
                task_id, getattr(new_hierarchy.type, 'value', new_hierarchy.type),
                len(validation.errors)
            )
            raise HierarchyValidationError(validation.errors, validation.warnings, code)

        now = reference_time or datetime.now(timezone.utc)
        updated = replace(
            current_task,
            hierarchy_type=new_hierarchy.type,
            project_id=new_hierarchy.project_id,
            goal_id=new_hierarchy.goal_id,
            updated_at=now.isoformat()
        )

        logger.info(
            "hierarchy_changed task_id=%s from=%s to=%s",
            task_id,
            getattr(current_task.hierarchy_type, 'value', current_task.hierarchy_type),
            getattr(new_hierarchy.type, 'value', new_hierarchy.type)
        )
        return updated


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(value, high))


def _project_title(project: Optional[Project]) -> str:
    return project.title if project and project.title else PROJECT_PLACEHOLDER
