"""
Unit Tests for the Workly hierarchy engine.

This module covers path formatting, change validation, contribution and
independence scoring, the today view, change execution and the REST
endpoints built on top of them.
"""

from datetime import datetime, timezone
from unittest import mock
import json

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from . import engine
from .engine import (
    ErrorCode,
    GOAL_PLACEHOLDER,
    HierarchyManager,
    HierarchyValidationError,
    INDEPENDENT_LABEL,
    MSG_COMPLETED_LOCKED,
    MSG_PROJECT_GOAL_MISMATCH,
    PROJECT_PLACEHOLDER,
    UNKNOWN_LABEL,
)
from .entities import (
    CPERStage,
    CPERWorkflowData,
    ExecutionData,
    Goal,
    HierarchyChoice,
    HierarchyType,
    Project,
    TaskPriority,
    WorklyTask,
    has_goal_connection,
    has_project_connection,
    is_directly_connected_to_goal,
    is_goal_connected_through_project,
    is_independent_task,
    is_workly_task,
)


def make_task(
    task_id='t1',
    hierarchy_type=HierarchyType.INDEPENDENT,
    stage=CPERStage.EXECUTING,
    workflow_focused=False,
    **overrides
):
    """Build a task with sensible defaults for tests."""
    execution = ExecutionData(is_today=True, is_focused=workflow_focused)
    fields = dict(
        id=task_id,
        title=f'Task {task_id}',
        hierarchy_type=hierarchy_type,
        cper_workflow=CPERWorkflowData(stage=stage, execution_data=execution),
        priority=TaskPriority.MEDIUM,
        estimated_minutes=60,
        is_today=True,
        created_at='2026-01-05T09:00:00+00:00',
        updated_at='2026-01-05T09:00:00+00:00',
    )
    fields.update(overrides)
    return WorklyTask(**fields)


def task_payload(task_id='t1', **overrides):
    """Raw API payload for a task."""
    payload = {
        'id': task_id,
        'title': f'Task {task_id}',
        'hierarchy_type': 'independent',
        'cper_workflow': {'stage': 'executing'},
        'priority': 'medium',
        'estimated_minutes': 60,
        'is_today': True,
    }
    payload.update(overrides)
    return payload


class HierarchyPathTests(TestCase):
    """Tests for hierarchy path formatting."""

    def setUp(self):
        self.manager = HierarchyManager()
        self.project = Project(id='p1', title='Backend', tasks_count=4)
        self.goal = Goal(id='g1', title='Launch v2', project_count=2)

    def test_independent_label(self):
        task = make_task()
        self.assertEqual(self.manager.get_hierarchy_path(task), INDEPENDENT_LABEL)

    def test_project_only_uses_project_title(self):
        task = make_task(hierarchy_type=HierarchyType.PROJECT_ONLY, project_id='p1')
        self.assertEqual(self.manager.get_hierarchy_path(task, self.project), 'Backend')

    def test_project_only_without_project_placeholder(self):
        task = make_task(hierarchy_type=HierarchyType.PROJECT_ONLY, project_id='p1')
        self.assertEqual(self.manager.get_hierarchy_path(task), PROJECT_PLACEHOLDER)

    def test_goal_direct_uses_goal_title(self):
        task = make_task(hierarchy_type=HierarchyType.GOAL_DIRECT, goal_id='g1')
        self.assertEqual(
            self.manager.get_hierarchy_path(task, goal=self.goal), 'Launch v2'
        )
        self.assertEqual(self.manager.get_hierarchy_path(task), GOAL_PLACEHOLDER)

    def test_full_hierarchy_path(self):
        task = make_task(
            hierarchy_type=HierarchyType.FULL_HIERARCHY, project_id='p1', goal_id='g1'
        )
        self.assertEqual(
            self.manager.get_hierarchy_path(task, self.project, self.goal),
            'Launch v2 > Backend'
        )

    def test_full_hierarchy_without_references_uses_both_placeholders(self):
        """Missing project and goal degrade to placeholder labels, never an error."""
        task = make_task(hierarchy_type=HierarchyType.FULL_HIERARCHY)
        self.assertEqual(
            self.manager.get_hierarchy_path(task, None, None),
            f'{GOAL_PLACEHOLDER} > {PROJECT_PLACEHOLDER}'
        )

    def test_unknown_type_label(self):
        task = make_task(hierarchy_type='legacy')
        self.assertEqual(self.manager.get_hierarchy_path(task), UNKNOWN_LABEL)


class ChangeValidationTests(TestCase):
    """Tests for hierarchy change validation."""

    def setUp(self):
        self.manager = HierarchyManager()

    def test_completed_task_always_blocked(self):
        """Completed tasks are locked whatever the target hierarchy."""
        task = make_task(stage=CPERStage.COMPLETED)
        choices = [
            HierarchyChoice(type=HierarchyType.INDEPENDENT),
            HierarchyChoice(type=HierarchyType.PROJECT_ONLY, project_id='p1'),
            HierarchyChoice(type=HierarchyType.GOAL_DIRECT, goal_id='g1'),
            HierarchyChoice(type=HierarchyType.FULL_HIERARCHY, project_id='p1', goal_id='g1'),
        ]
        for choice in choices:
            with self.subTest(target=choice.type):
                result = self.manager.can_change_hierarchy(task, choice)
                self.assertFalse(result.is_valid)
                self.assertIn(MSG_COMPLETED_LOCKED, result.errors)

    def test_executing_same_type_warns_but_allows(self):
        task = make_task(stage=CPERStage.EXECUTING)
        result = self.manager.can_change_hierarchy(
            task, HierarchyChoice(type=HierarchyType.INDEPENDENT)
        )

        self.assertTrue(result.is_valid)
        self.assertEqual(result.errors, [])
        self.assertGreaterEqual(len(result.warnings), 1)

    def test_planned_task_has_no_warnings(self):
        task = make_task(stage=CPERStage.PLANNED)
        result = self.manager.can_change_hierarchy(
            task, HierarchyChoice(type=HierarchyType.INDEPENDENT)
        )
        self.assertTrue(result.is_valid)
        self.assertEqual(result.warnings, [])

    def test_focused_to_independent_warns(self):
        """The workflow's focus flag drives the warning."""
        task = make_task(
            hierarchy_type=HierarchyType.PROJECT_ONLY,
            project_id='p1',
            stage=CPERStage.PLANNED,
            workflow_focused=True
        )
        result = self.manager.can_change_hierarchy(
            task, HierarchyChoice(type=HierarchyType.INDEPENDENT)
        )
        self.assertTrue(result.is_valid)
        self.assertEqual(len(result.warnings), 1)

    def test_top_level_focus_flag_alone_does_not_warn(self):
        task = make_task(
            hierarchy_type=HierarchyType.PROJECT_ONLY,
            project_id='p1',
            stage=CPERStage.PLANNED,
            is_focused=True
        )
        result = self.manager.can_change_hierarchy(
            task, HierarchyChoice(type=HierarchyType.INDEPENDENT)
        )
        self.assertEqual(result.warnings, [])

    def test_leaving_independent_adds_suggestion(self):
        task = make_task(stage=CPERStage.PLANNED)
        result = self.manager.can_change_hierarchy(
            task, HierarchyChoice(type=HierarchyType.PROJECT_ONLY, project_id='p1')
        )
        self.assertTrue(result.is_valid)
        self.assertEqual(len(result.suggestions), 1)

    def test_project_of_another_goal_is_rejected(self):
        task = make_task(stage=CPERStage.PLANNED)
        choice = HierarchyChoice(
            type=HierarchyType.FULL_HIERARCHY, project_id='p1', goal_id='g1'
        )
        projects = [Project(id='p1', title='Backend', goal_id='g2')]

        result = self.manager.can_change_hierarchy(task, choice, projects)
        self.assertFalse(result.is_valid)
        self.assertIn(MSG_PROJECT_GOAL_MISMATCH, result.errors)

    def test_project_membership_unknown_is_not_checked(self):
        """Without projects, or without a project goal id, nothing is reported."""
        task = make_task(stage=CPERStage.PLANNED)
        choice = HierarchyChoice(
            type=HierarchyType.FULL_HIERARCHY, project_id='p1', goal_id='g1'
        )

        self.assertTrue(self.manager.can_change_hierarchy(task, choice).is_valid)
        self.assertTrue(self.manager.can_change_hierarchy(
            task, choice, [Project(id='p1', title='Backend')]
        ).is_valid)
        self.assertTrue(self.manager.can_change_hierarchy(
            task, choice, [Project(id='p9', title='Other', goal_id='g2')]
        ).is_valid)
        self.assertTrue(self.manager.can_change_hierarchy(
            task, choice, [Project(id='p1', title='Backend', goal_id='g1')]
        ).is_valid)

    def test_validation_does_not_mutate_task(self):
        task = make_task(stage=CPERStage.COMPLETED)
        before = task.to_dict()
        self.manager.can_change_hierarchy(task, HierarchyChoice(type=HierarchyType.GOAL_DIRECT))
        self.assertEqual(task.to_dict(), before)


class ContributionScoreTests(TestCase):
    """Tests for the contribution and independence scores."""

    def setUp(self):
        self.manager = HierarchyManager()

    def test_goal_direct_example(self):
        """High priority, direct, 2 projects: 100 / 6 * 1.5 = 25."""
        task = make_task(
            hierarchy_type=HierarchyType.GOAL_DIRECT,
            goal_id='g1',
            priority=TaskPriority.HIGH
        )
        goal = Goal(id='g1', title='Launch v2', project_count=2)

        analysis = self.manager.analyze_hierarchy(task, goal=goal)
        self.assertAlmostEqual(analysis.goal_connection.contribution_percentage, 25.0, places=5)
        self.assertTrue(analysis.goal_connection.is_direct_connection)
        self.assertAlmostEqual(analysis.impact.on_goal, 25.0, places=5)

    def test_goal_through_project_uses_ten_tasks_per_project(self):
        task = make_task(
            hierarchy_type=HierarchyType.FULL_HIERARCHY, project_id='p1', goal_id='g1'
        )
        goal = Goal(id='g1', title='Launch v2', project_count=2)

        analysis = self.manager.analyze_hierarchy(task, goal=goal)
        self.assertAlmostEqual(analysis.goal_connection.contribution_percentage, 5.0)
        self.assertFalse(analysis.goal_connection.is_direct_connection)

    def test_project_contribution_uses_priority_and_time(self):
        """4 tasks, high priority, one workday: 25 * 1.5 * 1 = 37.5."""
        task = make_task(
            hierarchy_type=HierarchyType.PROJECT_ONLY,
            project_id='p1',
            priority=TaskPriority.HIGH,
            estimated_minutes=480
        )
        project = Project(id='p1', title='Backend', progress=40, tasks_count=4)

        analysis = self.manager.analyze_hierarchy(task, project)
        self.assertAlmostEqual(analysis.project_connection.contribution_percentage, 37.5)
        self.assertEqual(analysis.project_connection.project_progress, 40)
        self.assertAlmostEqual(analysis.impact.on_project, 37.5)

    def test_time_weight_is_capped(self):
        self.assertEqual(self.manager.calculate_time_weight(480 * 5), 2.0)
        self.assertEqual(self.manager.calculate_time_weight(0), 0)

    def test_project_requires_task_project_id(self):
        task = make_task()
        project = Project(id='p1', title='Backend', tasks_count=4)

        analysis = self.manager.analyze_hierarchy(task, project)
        self.assertIsNone(analysis.project_connection)
        self.assertIsNone(analysis.impact.on_project)

    def test_priority_weights(self):
        self.assertEqual(self.manager.get_priority_weight(TaskPriority.URGENT), 2.0)
        self.assertEqual(self.manager.get_priority_weight('high'), 1.5)
        self.assertEqual(self.manager.get_priority_weight(TaskPriority.MEDIUM), 1.0)
        self.assertEqual(self.manager.get_priority_weight(TaskPriority.LOW), 0.7)
        self.assertEqual(self.manager.get_priority_weight('someday'), 1.0)

    def test_independence_lookup(self):
        expected = {
            HierarchyType.INDEPENDENT: 100,
            HierarchyType.PROJECT_ONLY: 30,
            HierarchyType.GOAL_DIRECT: 20,
            HierarchyType.FULL_HIERARCHY: 0,
            'legacy': 50,
        }
        for hierarchy_type, score in expected.items():
            with self.subTest(hierarchy_type=hierarchy_type):
                task = make_task(hierarchy_type=hierarchy_type)
                self.assertEqual(self.manager.calculate_independence_score(task), score)

    def test_scores_stay_within_bounds(self):
        """Zero counts and long tasks still land in 0-100."""
        for hierarchy_type in HierarchyType:
            for priority in TaskPriority:
                for count in (0, 1, 3):
                    task = make_task(
                        hierarchy_type=hierarchy_type,
                        project_id='p1',
                        goal_id='g1',
                        priority=priority,
                        estimated_minutes=2000
                    )
                    project = Project(id='p1', title='Backend', tasks_count=count)
                    goal = Goal(id='g1', title='Launch v2', project_count=count)
                    analysis = self.manager.analyze_hierarchy(task, project, goal)

                    for value in (
                        analysis.project_connection.contribution_percentage,
                        analysis.goal_connection.contribution_percentage,
                        analysis.impact.independence,
                    ):
                        self.assertGreaterEqual(value, 0)
                        self.assertLessEqual(value, 100)

    def test_analysis_is_repeatable(self):
        task = make_task(
            hierarchy_type=HierarchyType.FULL_HIERARCHY, project_id='p1', goal_id='g1'
        )
        project = Project(id='p1', title='Backend', tasks_count=5)
        goal = Goal(id='g1', title='Launch v2', project_count=3)

        first = self.manager.analyze_hierarchy(task, project, goal).to_dict()
        second = self.manager.analyze_hierarchy(task, project, goal).to_dict()
        self.assertEqual(first, second)


class RecommendationTests(TestCase):
    """Tests for advisory recommendations."""

    def setUp(self):
        self.manager = HierarchyManager()

    def test_long_independent_task_should_move_to_project(self):
        task = make_task(estimated_minutes=121)
        recs = self.manager.analyze_hierarchy(task).recommendations
        self.assertIsNotNone(recs.should_move_to_project)

    def test_two_hour_independent_task_stays(self):
        task = make_task(estimated_minutes=120)
        recs = self.manager.analyze_hierarchy(task).recommendations
        self.assertIsNone(recs.should_move_to_project)

    def test_high_priority_project_task_should_connect_to_goal(self):
        task = make_task(
            hierarchy_type=HierarchyType.PROJECT_ONLY,
            project_id='p1',
            priority=TaskPriority.HIGH
        )
        recs = self.manager.analyze_hierarchy(task).recommendations
        self.assertIsNotNone(recs.should_connect_to_goal)

        urgent = make_task(
            hierarchy_type=HierarchyType.PROJECT_ONLY,
            project_id='p1',
            priority=TaskPriority.URGENT
        )
        self.assertIsNone(
            self.manager.analyze_hierarchy(urgent).recommendations.should_connect_to_goal
        )

    def test_simplify_advice_never_fires_with_current_scores(self):
        """Full-hierarchy tasks score 0 independence, so the advice stays silent."""
        task = make_task(
            hierarchy_type=HierarchyType.FULL_HIERARCHY, project_id='p1', goal_id='g1'
        )
        recs = self.manager.analyze_hierarchy(task).recommendations
        self.assertIsNone(recs.should_become_independent)
        self.assertEqual(recs.to_dict(), {})

    def test_simplify_advice_fires_when_independence_is_high(self):
        task = make_task(
            hierarchy_type=HierarchyType.FULL_HIERARCHY, project_id='p1', goal_id='g1'
        )
        with mock.patch.dict(engine.INDEPENDENCE_SCORES, {HierarchyType.FULL_HIERARCHY: 90}):
            recs = self.manager.analyze_hierarchy(task).recommendations
        self.assertIsNotNone(recs.should_become_independent)


class TodayTasksTests(TestCase):
    """Tests for the today view."""

    def setUp(self):
        self.manager = HierarchyManager()

    def test_five_task_example(self):
        """2 focused, 1 urgent, 2 plain tasks."""
        tasks = [
            make_task('f1', is_focused=True),
            make_task('f2', is_focused=True, priority=TaskPriority.URGENT),
            make_task('u1', priority=TaskPriority.URGENT),
            make_task('p1', next_action='Draft outline'),
            make_task('p2'),
        ]
        result = self.manager.optimize_today_tasks(tasks)

        self.assertEqual([t.id for t in result.focused_tasks], ['f1', 'f2'])
        self.assertEqual([t.id for t in result.urgent_tasks], ['u1'])
        self.assertEqual([t.id for t in result.today_tasks], ['p2'])
        self.assertLessEqual(len(result.today_tasks), 2)

    def test_only_today_executing_tasks_participate(self):
        tasks = [
            make_task('a'),
            make_task('b', is_today=False),
            make_task('c', stage=CPERStage.PLANNED),
            make_task('d', stage=CPERStage.COMPLETED),
        ]
        result = self.manager.optimize_today_tasks(tasks)

        self.assertEqual([t.id for t in result.today_tasks], ['a'])
        self.assertEqual(result.time_analysis.total_estimated_minutes, 60)

    def test_focused_urgent_and_remaining_are_disjoint(self):
        tasks = [
            make_task('f', is_focused=True, next_action='Go'),
            make_task('u', priority=TaskPriority.URGENT),
            make_task('r', next_action='Call vendor'),
            make_task('x'),
        ]
        result = self.manager.optimize_today_tasks(tasks)
        buckets = [result.focused_tasks, result.urgent_tasks, result.today_tasks]

        seen = [task.id for bucket in buckets for task in bucket]
        self.assertEqual(len(seen), len(set(seen)))

    def test_ready_to_start_overlaps_other_buckets(self):
        """The ready view includes focused and urgent tasks with a next action."""
        tasks = [
            make_task('f', is_focused=True, next_action='Open the doc'),
            make_task('u', priority=TaskPriority.URGENT, next_action='Reply'),
            make_task('r', next_action='Call vendor'),
            make_task('x'),
        ]
        result = self.manager.optimize_today_tasks(tasks)

        self.assertEqual([t.id for t in result.ready_to_start_tasks], ['f', 'u', 'r'])
        self.assertIn(tasks[0], result.focused_tasks)
        self.assertIn(tasks[0], result.ready_to_start_tasks)

    def test_exclusive_ready_completes_the_partition(self):
        tasks = [
            make_task('f', is_focused=True, next_action='Open the doc'),
            make_task('u', priority=TaskPriority.URGENT, next_action='Reply'),
            make_task('r', next_action='Call vendor'),
            make_task('x'),
        ]
        result = self.manager.optimize_today_tasks(tasks)
        buckets = [
            result.focused_tasks,
            result.urgent_tasks,
            result.exclusive_ready_to_start_tasks,
            result.today_tasks,
        ]

        ids = sorted(task.id for bucket in buckets for task in bucket)
        self.assertEqual(ids, ['f', 'r', 'u', 'x'])
        self.assertEqual([t.id for t in result.exclusive_ready_to_start_tasks], ['r'])

    def test_whitespace_next_action_counts_as_missing(self):
        result = self.manager.optimize_today_tasks([make_task('w', next_action='   ')])
        self.assertEqual(result.ready_to_start_tasks, [])
        self.assertEqual([t.id for t in result.today_tasks], ['w'])

    def test_grouping_by_project_and_goal(self):
        tasks = [
            make_task('i1'),
            make_task('p1', hierarchy_type=HierarchyType.PROJECT_ONLY, project_id='proj-b'),
            make_task('f1', hierarchy_type=HierarchyType.FULL_HIERARCHY,
                      project_id='proj-a', goal_id='goal-1'),
            make_task('p2', hierarchy_type=HierarchyType.PROJECT_ONLY, project_id='proj-b'),
            make_task('g1', hierarchy_type=HierarchyType.GOAL_DIRECT, goal_id='goal-1'),
            make_task('g2', hierarchy_type=HierarchyType.GOAL_DIRECT, goal_id='goal-2'),
        ]
        projects = [Project(id='proj-b', title='Billing')]
        goals = [Goal(id='goal-1', title='Launch v2')]

        grouped = self.manager.optimize_today_tasks(tasks, projects, goals).grouped_by_hierarchy

        self.assertEqual([t.id for t in grouped.independent], ['i1'])

        self.assertEqual([g.project_id for g in grouped.by_project], ['proj-b', 'proj-a'])
        self.assertEqual(grouped.by_project[0].project_title, 'Billing')
        self.assertEqual([t.id for t in grouped.by_project[0].tasks], ['p1', 'p2'])
        self.assertEqual(grouped.by_project[1].project_title, PROJECT_PLACEHOLDER)

        self.assertEqual([g.goal_id for g in grouped.by_goal], ['goal-1', 'goal-2'])
        launch = grouped.by_goal[0]
        self.assertEqual(launch.goal_title, 'Launch v2')
        self.assertEqual([t.id for t in launch.direct_tasks], ['g1'])
        self.assertEqual(len(launch.project_tasks), 1)
        self.assertEqual(launch.project_tasks[0].project_id, 'proj-a')
        self.assertEqual([t.id for t in launch.project_tasks[0].tasks], ['f1'])
        self.assertEqual(grouped.by_goal[1].goal_title, GOAL_PLACEHOLDER)

    def test_time_analysis(self):
        tasks = [
            make_task('a', is_focused=True, estimated_minutes=90),
            make_task('b', estimated_minutes=30),
        ]
        analysis = self.manager.optimize_today_tasks(tasks).time_analysis

        self.assertEqual(analysis.total_estimated_minutes, 120)
        self.assertEqual(analysis.focused_tasks_minutes, 90)
        self.assertEqual(analysis.average_task_minutes, 60)
        self.assertEqual(analysis.recommended_daily_limit, 480)
        self.assertEqual(analysis.remaining_minutes, 360)
        self.assertFalse(analysis.is_over_limit)

    def test_empty_input(self):
        result = self.manager.optimize_today_tasks([])
        self.assertEqual(result.time_analysis.average_task_minutes, 0)
        self.assertEqual(result.grouped_by_hierarchy.by_goal, [])

    def test_optimization_is_repeatable(self):
        tasks = [
            make_task('a', is_focused=True),
            make_task('b', hierarchy_type=HierarchyType.GOAL_DIRECT, goal_id='g1'),
        ]
        first = self.manager.optimize_today_tasks(tasks).to_dict()
        second = self.manager.optimize_today_tasks(tasks).to_dict()
        self.assertEqual(first, second)


class ChangeHierarchyTests(TestCase):
    """Tests for applying hierarchy changes."""

    def setUp(self):
        self.manager = HierarchyManager()
        self.now = datetime(2026, 3, 2, 10, 30, tzinfo=timezone.utc)

    def test_change_returns_updated_copy(self):
        task = make_task(stage=CPERStage.PLANNED)
        choice = HierarchyChoice(
            type=HierarchyType.FULL_HIERARCHY, project_id='p1', goal_id='g1'
        )

        updated = self.manager.change_hierarchy(task.id, choice, task, reference_time=self.now)

        self.assertEqual(updated.hierarchy_type, HierarchyType.FULL_HIERARCHY)
        self.assertEqual(updated.project_id, 'p1')
        self.assertEqual(updated.goal_id, 'g1')
        self.assertEqual(updated.updated_at, self.now.isoformat())
        self.assertEqual(updated.title, task.title)
        # Original untouched
        self.assertEqual(task.hierarchy_type, HierarchyType.INDEPENDENT)
        self.assertIsNone(task.project_id)

    def test_change_clears_ids_when_becoming_independent(self):
        task = make_task(
            hierarchy_type=HierarchyType.FULL_HIERARCHY,
            project_id='p1',
            goal_id='g1',
            stage=CPERStage.PLANNED
        )
        updated = self.manager.change_hierarchy(
            task.id, HierarchyChoice(type=HierarchyType.INDEPENDENT), task
        )
        self.assertIsNone(updated.project_id)
        self.assertIsNone(updated.goal_id)
        self.assertNotEqual(updated.updated_at, task.updated_at)

    def test_completed_task_raises(self):
        task = make_task(stage=CPERStage.COMPLETED)

        with self.assertRaises(HierarchyValidationError) as ctx:
            self.manager.change_hierarchy(
                task.id, HierarchyChoice(type=HierarchyType.GOAL_DIRECT, goal_id='g1'), task
            )

        self.assertIn(MSG_COMPLETED_LOCKED, str(ctx.exception))
        self.assertEqual(ctx.exception.code, ErrorCode.ERR_HIERARCHY_LOCKED)

    def test_mismatched_project_raises_with_mismatch_code(self):
        task = make_task(stage=CPERStage.PLANNED)
        choice = HierarchyChoice(
            type=HierarchyType.FULL_HIERARCHY, project_id='p1', goal_id='g1'
        )
        projects = [Project(id='p1', title='Backend', goal_id='g2')]

        with self.assertRaises(HierarchyValidationError) as ctx:
            self.manager.change_hierarchy(task.id, choice, task, projects=projects)
        self.assertEqual(ctx.exception.code, ErrorCode.ERR_HIERARCHY_MISMATCH)


class EntityTests(TestCase):
    """Tests for value object parsing and type guards."""

    def test_from_dict_parses_enums(self):
        task = WorklyTask.from_dict({
            'id': 7,
            'title': 'Write tests',
            'hierarchy_type': 'goal_direct',
            'goal_id': 'g1',
            'priority': 'urgent',
            'cper_workflow': {
                'stage': 'executing',
                'execution_data': {'is_focused': True}
            },
        })

        self.assertEqual(task.id, '7')
        self.assertIs(task.hierarchy_type, HierarchyType.GOAL_DIRECT)
        self.assertIs(task.priority, TaskPriority.URGENT)
        self.assertIs(task.stage, CPERStage.EXECUTING)
        self.assertTrue(task.cper_workflow.execution_data.is_focused)
        self.assertEqual(task.estimated_minutes, 0)

    def test_unknown_values_are_kept_raw(self):
        task = WorklyTask.from_dict({
            'id': 't', 'title': 'Old', 'hierarchy_type': 'legacy',
            'priority': 'someday', 'cper_workflow': {'stage': 'captured'}
        })
        self.assertEqual(task.hierarchy_type, 'legacy')
        self.assertEqual(HierarchyManager().calculate_independence_score(task), 50)

    def test_round_trip_keeps_hierarchy(self):
        task = make_task(hierarchy_type=HierarchyType.PROJECT_ONLY, project_id='p1')
        data = task.to_dict()
        self.assertEqual(data['hierarchy_type'], 'project_only')
        self.assertEqual(WorklyTask.from_dict(data), task)

    def test_type_guards(self):
        independent = make_task()
        project_only = make_task(hierarchy_type=HierarchyType.PROJECT_ONLY)
        goal_direct = make_task(hierarchy_type=HierarchyType.GOAL_DIRECT)
        full = make_task(hierarchy_type=HierarchyType.FULL_HIERARCHY)

        self.assertTrue(is_independent_task(independent))
        self.assertTrue(is_directly_connected_to_goal(goal_direct))
        self.assertTrue(is_goal_connected_through_project(full))
        self.assertFalse(is_goal_connected_through_project(goal_direct))
        self.assertTrue(has_project_connection(project_only))
        self.assertTrue(has_project_connection(full))
        self.assertFalse(has_project_connection(goal_direct))
        self.assertTrue(has_goal_connection(goal_direct))
        self.assertFalse(has_goal_connection(independent))

    def test_is_workly_task(self):
        self.assertTrue(is_workly_task(task_payload()))
        self.assertFalse(is_workly_task({'id': 1, 'title': 'Plain'}))
        self.assertFalse(is_workly_task(None))


class APIEndpointTests(APITestCase):
    """Tests for the API endpoints."""

    def setUp(self):
        cache.clear()

    def post(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def test_api_info_endpoint(self):
        """GET /api/ should return API information."""
        response = self.client.get('/api/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('name', response.data)
        self.assertIn('endpoints', response.data)
        self.assertIn('hierarchy_types', response.data)

    def test_path_endpoint(self):
        response = self.post('/api/hierarchy/path/', {
            'task': task_payload(
                hierarchy_type='full_hierarchy', project_id='p1', goal_id='g1'
            ),
            'project': {'id': 'p1', 'title': 'Backend'},
            'goal': {'id': 'g1', 'title': 'Launch v2'},
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['path'], 'Launch v2 > Backend')

    def test_path_endpoint_rejects_invalid_task(self):
        response = self.post('/api/hierarchy/path/', {
            'task': task_payload(title='  ', hierarchy_type='sideways'),
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error_code'], ErrorCode.ERR_INVALID_PAYLOAD.value)

    def test_validate_endpoint_reports_locked_task(self):
        response = self.post('/api/hierarchy/validate/', {
            'task': task_payload(cper_workflow={'stage': 'completed'}),
            'new_hierarchy': {'type': 'project_only', 'project_id': 'p1'},
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['validation']['is_valid'])
        self.assertIn(MSG_COMPLETED_LOCKED, response.data['validation']['errors'])

    def test_validate_endpoint_checks_choice_shape(self):
        """A full hierarchy must name both a project and a goal."""
        response = self.post('/api/hierarchy/validate/', {
            'task': task_payload(),
            'new_hierarchy': {'type': 'full_hierarchy', 'project_id': 'p1'},
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_analyze_endpoint(self):
        response = self.post('/api/hierarchy/analyze/', {
            'task': task_payload(
                hierarchy_type='goal_direct', goal_id='g1', priority='high'
            ),
            'goal': {'id': 'g1', 'title': 'Launch v2', 'project_count': 2},
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        analytics = response.data['analytics']
        self.assertEqual(analytics['connections']['goal_connection']['contribution_percentage'], 25.0)
        self.assertEqual(analytics['impact']['independence'], 20)
        self.assertEqual(response.data['path'], 'Launch v2')

    def test_change_endpoint_success(self):
        response = self.post('/api/hierarchy/change/', {
            'task': task_payload(cper_workflow={'stage': 'planned'}),
            'new_hierarchy': {'type': 'project_only', 'project_id': 'p1'},
            'reason': 'Belongs to the billing work',
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['task']['hierarchy_type'], 'project_only')
        self.assertEqual(response.data['task']['project_id'], 'p1')
        self.assertEqual(response.data['change_request']['from_hierarchy']['type'], 'independent')
        self.assertEqual(len(response.data['suggestions']), 1)

    def test_change_endpoint_conflict_for_completed_task(self):
        response = self.post('/api/hierarchy/change/', {
            'task': task_payload(cper_workflow={'stage': 'completed'}),
            'new_hierarchy': {'type': 'independent'},
        })

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error_code'], ErrorCode.ERR_HIERARCHY_LOCKED.value)

    def test_today_endpoint(self):
        response = self.post('/api/tasks/today/', {
            'tasks': [
                task_payload('f1', is_focused=True),
                task_payload('u1', priority='urgent'),
                task_payload('r1', next_action='Call vendor'),
                task_payload('p1', hierarchy_type='project_only', project_id='proj'),
                task_payload('later', is_today=False),
            ],
            'projects': [{'id': 'proj', 'title': 'Billing'}],
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['submitted_count'], 5)
        self.assertEqual(len(response.data['focused_tasks']), 1)
        self.assertEqual(len(response.data['urgent_tasks']), 1)
        self.assertEqual(len(response.data['ready_to_start_tasks']), 1)
        self.assertEqual(len(response.data['today_tasks']), 1)
        by_project = response.data['grouped_by_hierarchy']['by_project']
        self.assertEqual(by_project[0]['project_title'], 'Billing')
        self.assertEqual(response.data['time_analysis']['total_estimated_minutes'], 240)

    def test_today_endpoint_empty_tasks(self):
        response = self.post('/api/tasks/today/', {'tasks': []})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], ErrorCode.ERR_EMPTY_TASKS.value)
