"""
Serializers for the hierarchy API.

These validate incoming task, project and goal snapshots. Nothing is
persisted, so they are plain ``Serializer`` classes whose validated data is
turned into engine value objects with the ``to_*`` helpers at the bottom.
"""

from typing import Dict, List, Optional

from rest_framework import serializers

from .entities import (
    CPERStage,
    Goal,
    HierarchyChoice,
    HierarchyType,
    Project,
    TaskPriority,
    WorklyTask,
)


def _choices(enum_cls):
    return [(member.value, member.name.replace('_', ' ').title()) for member in enum_cls]


class ExecutionDataSerializer(serializers.Serializer):
    is_today = serializers.BooleanField(required=False, default=False)
    is_focused = serializers.BooleanField(required=False, default=False)
    started_at = serializers.CharField(required=False, allow_null=True)
    paused_at = serializers.CharField(required=False, allow_null=True)
    actual_time_spent = serializers.IntegerField(min_value=0, required=False, default=0)
    progress_notes = serializers.ListField(
        child=serializers.CharField(),
        required=False,
        default=list
    )


class CPERWorkflowSerializer(serializers.Serializer):
    stage = serializers.ChoiceField(choices=_choices(CPERStage))
    captured_at = serializers.CharField(required=False, allow_null=True)
    planned_at = serializers.CharField(required=False, allow_null=True)
    execution_started_at = serializers.CharField(required=False, allow_null=True)
    completed_at = serializers.CharField(required=False, allow_null=True)
    reviewed_at = serializers.CharField(required=False, allow_null=True)
    execution_data = ExecutionDataSerializer(required=False, allow_null=True)


class WorklyTaskSerializer(serializers.Serializer):
    """
    Serializer for a task snapshot submitted for hierarchy analysis.
    """

    id = serializers.CharField(max_length=64)
    title = serializers.CharField(max_length=255)
    hierarchy_type = serializers.ChoiceField(choices=_choices(HierarchyType))
    project_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    goal_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    cper_workflow = CPERWorkflowSerializer()
    priority = serializers.ChoiceField(
        choices=_choices(TaskPriority),
        default=TaskPriority.MEDIUM.value,
        required=False
    )
    estimated_minutes = serializers.IntegerField(min_value=0, required=False, default=0)
    actual_minutes = serializers.IntegerField(min_value=0, required=False, default=0)
    is_today = serializers.BooleanField(required=False, default=False)
    is_focused = serializers.BooleanField(required=False, default=False)
    next_action = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, trim_whitespace=False
    )
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    status = serializers.CharField(required=False, allow_null=True)
    due_date = serializers.CharField(required=False, allow_null=True)
    tags = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    created_at = serializers.CharField(required=False, allow_null=True)
    updated_at = serializers.CharField(required=False, allow_null=True)

    def validate_title(self, value):
        """Ensure title is not empty or just whitespace."""
        if not value or not value.strip():
            raise serializers.ValidationError("Title cannot be empty")
        return value.strip()

    def validate(self, attrs):
        # Blank ids mean "not connected"
        for key in ('project_id', 'goal_id'):
            if attrs.get(key) == '':
                attrs[key] = None
        return attrs


class ProjectSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64)
    title = serializers.CharField(max_length=255, allow_blank=True)
    progress = serializers.FloatField(min_value=0, max_value=100, required=False, default=0)
    tasks_count = serializers.IntegerField(min_value=0, required=False, default=0)
    goal_id = serializers.CharField(required=False, allow_null=True)


class GoalSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64)
    title = serializers.CharField(max_length=255, allow_blank=True)
    progress = serializers.FloatField(min_value=0, max_value=100, required=False, default=0)
    project_count = serializers.IntegerField(min_value=0, required=False, default=0)


class HierarchyChoiceSerializer(serializers.Serializer):
    """
    Serializer for a proposed hierarchy.

    The ids must match the type: a full hierarchy names both a project and a
    goal, an independent task names neither.
    """

    type = serializers.ChoiceField(choices=_choices(HierarchyType))
    project_id = serializers.CharField(required=False, allow_null=True)
    goal_id = serializers.CharField(required=False, allow_null=True)

    REQUIRED_IDS = {
        HierarchyType.INDEPENDENT.value: (),
        HierarchyType.PROJECT_ONLY.value: ('project_id',),
        HierarchyType.GOAL_DIRECT.value: ('goal_id',),
        HierarchyType.FULL_HIERARCHY.value: ('project_id', 'goal_id'),
    }

    def validate(self, attrs):
        required = self.REQUIRED_IDS[attrs['type']]
        errors = {}
        for key in ('project_id', 'goal_id'):
            present = bool(attrs.get(key))
            if key in required and not present:
                errors[key] = f"Required for hierarchy type '{attrs['type']}'"
            elif key not in required and present:
                errors[key] = f"Not allowed for hierarchy type '{attrs['type']}'"
        if errors:
            raise serializers.ValidationError(errors)
        return attrs


# ==================== Request Serializers ====================

class HierarchyPathRequestSerializer(serializers.Serializer):
    task = WorklyTaskSerializer()
    project = ProjectSerializer(required=False, allow_null=True)
    goal = GoalSerializer(required=False, allow_null=True)


class HierarchyAnalyzeRequestSerializer(HierarchyPathRequestSerializer):
    pass


class HierarchyValidateRequestSerializer(serializers.Serializer):
    task = WorklyTaskSerializer()
    new_hierarchy = HierarchyChoiceSerializer()
    projects = ProjectSerializer(many=True, required=False, allow_null=True)


class HierarchyChangeRequestSerializer(HierarchyValidateRequestSerializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)


class TodayTasksRequestSerializer(serializers.Serializer):
    """
    Serializer for today-view optimization requests.
    """

    tasks = serializers.ListField(
        child=WorklyTaskSerializer(),
        min_length=1,
        error_messages={
            'min_length': 'At least one task is required for the today view'
        }
    )
    projects = ProjectSerializer(many=True, required=False, default=list)
    goals = GoalSerializer(many=True, required=False, default=list)


# ==================== Conversion Helpers ====================

def to_task(data: Dict) -> WorklyTask:
    return WorklyTask.from_dict(data)


def to_project(data: Optional[Dict]) -> Optional[Project]:
    return Project.from_dict(data) if data else None


def to_goal(data: Optional[Dict]) -> Optional[Goal]:
    return Goal.from_dict(data) if data else None


def to_projects(data: Optional[List[Dict]]) -> List[Project]:
    return [Project.from_dict(item) for item in data or []]


def to_goals(data: Optional[List[Dict]]) -> List[Goal]:
    return [Goal.from_dict(item) for item in data or []]


def to_choice(data: Dict) -> HierarchyChoice:
    return HierarchyChoice.from_dict(data)
