"""
API Views for the Workly hierarchy engine.

This module exposes the engine's pure functions over REST: hierarchy
paths, change validation, contribution analysis, change execution and the
today view. No endpoint persists anything; the change endpoint returns the
updated task for the caller to write back through the task update API.
"""

import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, throttle_classes
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from .engine import ErrorCode, HierarchyManager, HierarchyValidationError
from .serializers import (
    HierarchyAnalyzeRequestSerializer,
    HierarchyChangeRequestSerializer,
    HierarchyPathRequestSerializer,
    HierarchyValidateRequestSerializer,
    TodayTasksRequestSerializer,
    to_choice,
    to_goal,
    to_goals,
    to_project,
    to_projects,
    to_task,
)

logger = logging.getLogger(__name__)

manager = HierarchyManager()


# ============================================
# RATE LIMITING CLASSES
# ============================================

class HierarchyRateThrottle(AnonRateThrottle):
    """Rate limit for per-task hierarchy endpoints."""
    scope = 'hierarchy'


class TodayRateThrottle(AnonRateThrottle):
    """Rate limit for the today view."""
    scope = 'today'


# ============================================
# HELPERS
# ============================================

def _invalid_payload(serializer, endpoint: str) -> Response:
    logger.warning("invalid_payload endpoint=%s fields=%s", endpoint, sorted(serializer.errors))
    return Response(
        {
            'success': False,
            'error_code': ErrorCode.ERR_INVALID_PAYLOAD.value,
            'errors': serializer.errors,
            'message': 'Invalid input data. Please check the request format.'
        },
        status=status.HTTP_400_BAD_REQUEST
    )


def _optional_projects(data):
    projects = data.get('projects')
    return None if projects is None else to_projects(projects)


# ============================================
# API ENDPOINTS
# ============================================

@extend_schema(
    summary="Format a task's hierarchy path",
    description="Return a readable path such as 'Goal > Project' or 'Independent task'.",
    request=HierarchyPathRequestSerializer,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Hierarchy']
)
@api_view(['POST'])
@throttle_classes([HierarchyRateThrottle])
def hierarchy_path(request: Request) -> Response:
    """
    POST /api/hierarchy/path/

    Request Body:
    {
        "task": {...},
        "project": {...},   // Optional
        "goal": {...}       // Optional
    }
    """
    serializer = HierarchyPathRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_payload(serializer, 'path')

    data = serializer.validated_data
    task = to_task(data['task'])
    path = manager.get_hierarchy_path(
        task, to_project(data.get('project')), to_goal(data.get('goal'))
    )

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'task_id': task.id,
        'path': path
    })


@extend_schema(
    summary="Validate a hierarchy change",
    description="""
    Check whether a task may move to a new hierarchy.

    Completed tasks are locked. Executing and focused tasks produce warnings.
    Supplying projects enables the project-belongs-to-goal check.
    """,
    request=HierarchyValidateRequestSerializer,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Hierarchy']
)
@api_view(['POST'])
@throttle_classes([HierarchyRateThrottle])
def validate_hierarchy_change(request: Request) -> Response:
    """
    POST /api/hierarchy/validate/

    Request Body:
    {
        "task": {...},
        "new_hierarchy": {"type": "full_hierarchy", "project_id": "p1", "goal_id": "g1"},
        "projects": [...]   // Optional
    }
    """
    serializer = HierarchyValidateRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_payload(serializer, 'validate')

    data = serializer.validated_data
    validation = manager.can_change_hierarchy(
        to_task(data['task']),
        to_choice(data['new_hierarchy']),
        _optional_projects(data)
    )

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'validation': validation.to_dict()
    })


@extend_schema(
    summary="Analyze a task's hierarchy",
    description="""
    Estimate the task's contribution to its project and goal, its
    independence score, and advisory recommendations.
    """,
    request=HierarchyAnalyzeRequestSerializer,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Analysis']
)
@api_view(['POST'])
@throttle_classes([HierarchyRateThrottle])
def analyze_hierarchy(request: Request) -> Response:
    """
    POST /api/hierarchy/analyze/
    """
    serializer = HierarchyAnalyzeRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_payload(serializer, 'analyze')

    data = serializer.validated_data
    task = to_task(data['task'])
    project = to_project(data.get('project'))
    goal = to_goal(data.get('goal'))
    analytics = manager.analyze_hierarchy(task, project, goal)

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'path': manager.get_hierarchy_path(task, project, goal),
        'analytics': analytics.to_dict()
    })


@extend_schema(
    summary="Change a task's hierarchy",
    description="""
    Validate and apply a hierarchy change. The updated task is returned,
    not stored; write it back through the task update endpoint.
    Blocked changes return 409.
    """,
    request=HierarchyChangeRequestSerializer,
    responses={200: OpenApiTypes.OBJECT, 409: OpenApiTypes.OBJECT},
    tags=['Hierarchy']
)
@api_view(['POST'])
@throttle_classes([HierarchyRateThrottle])
def change_hierarchy(request: Request) -> Response:
    """
    POST /api/hierarchy/change/

    Request Body:
    {
        "task": {...},
        "new_hierarchy": {...},
        "projects": [...],   // Optional
        "reason": "..."      // Optional
    }
    """
    serializer = HierarchyChangeRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_payload(serializer, 'change')

    data = serializer.validated_data
    task = to_task(data['task'])
    choice = to_choice(data['new_hierarchy'])
    projects = _optional_projects(data)

    try:
        updated = manager.change_hierarchy(task.id, choice, task, projects=projects)
    except HierarchyValidationError as exc:
        return Response(
            {'success': False, **exc.to_dict()},
            status=status.HTTP_409_CONFLICT
        )

    validation = manager.can_change_hierarchy(task, choice, projects)
    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'task': updated.to_dict(),
        'change_request': {
            'task_id': task.id,
            'from_hierarchy': {
                'type': getattr(task.hierarchy_type, 'value', task.hierarchy_type),
                'project_id': task.project_id,
                'goal_id': task.goal_id
            },
            'to_hierarchy': choice.to_dict(),
            'reason': data.get('reason', '')
        },
        'warnings': validation.warnings,
        'suggestions': validation.suggestions
    })


@extend_schema(
    summary="Optimize today's tasks",
    description="""
    Bucket today's executing tasks into focused, urgent, ready-to-start and
    remaining, group them by project and goal, and summarize the time load
    against an 8-hour day.
    """,
    request=TodayTasksRequestSerializer,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Today']
)
@api_view(['POST'])
@throttle_classes([TodayRateThrottle])
def optimize_today_tasks(request: Request) -> Response:
    """
    POST /api/tasks/today/

    Request Body:
    {
        "tasks": [...],
        "projects": [...],   // Optional
        "goals": [...]       // Optional
    }
    """
    if not request.data.get('tasks'):
        return Response(
            {
                'success': False,
                'error_code': ErrorCode.ERR_EMPTY_TASKS.value,
                'message': 'No tasks provided. Please submit at least one task.'
            },
            status=status.HTTP_400_BAD_REQUEST
        )

    serializer = TodayTasksRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_payload(serializer, 'today')

    data = serializer.validated_data
    tasks = [to_task(item) for item in data['tasks']]
    optimized = manager.optimize_today_tasks(
        tasks, to_projects(data.get('projects')), to_goals(data.get('goals'))
    )

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'submitted_count': len(tasks),
        **optimized.to_dict()
    })


@extend_schema(
    summary="API information",
    description="Get API information and available endpoints.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Info']
)
@api_view(['GET'])
def api_info(request: Request) -> Response:
    """
    Return API information and available endpoints.

    GET /api/
    """
    return Response({
        'name': 'Workly Hierarchy API',
        'version': '1.0.0',
        'documentation': '/api/docs/',
        'features': [
            'Hierarchy path formatting',
            'Hierarchy change validation',
            'Project and goal contribution scoring',
            'Independence scoring',
            'Today view bucketing and grouping',
            'OpenAPI/Swagger documentation'
        ],
        'endpoints': {
            'POST /api/hierarchy/path/': 'Format a task hierarchy path',
            'POST /api/hierarchy/validate/': 'Validate a proposed hierarchy change',
            'POST /api/hierarchy/analyze/': 'Contribution and independence analysis',
            'POST /api/hierarchy/change/': 'Apply a hierarchy change (not persisted)',
            'POST /api/tasks/today/': 'Today view buckets and groups',
            'GET /api/docs/': 'Interactive API documentation',
            'GET /api/schema/': 'OpenAPI schema',
            'GET /api/': 'This info endpoint'
        },
        'hierarchy_types': {
            'independent': 'No project, no goal',
            'project_only': 'Belongs to a project without a goal',
            'goal_direct': 'Belongs directly to a goal',
            'full_hierarchy': 'Belongs to a project that serves a goal'
        },
        'error_codes': {
            code.value: code.name for code in ErrorCode
        }
    })
