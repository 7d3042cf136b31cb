"""
Tests for task status transitions and score credits.
"""

import pytest
from mapreview import db
from mapreview.constants import ActionKind, ReviewStatus, TaskStatus
from mapreview.errors import InvalidArgumentError, NotFoundError
from mapreview.models import Action, Task, UserMetrics
from mapreview.services import scoring
from mapreview.services.task_status import load_tasks, set_task_status


class TestLoadTasks:
    """Tests for load_tasks"""

    def test_keeps_requested_order(self, bundle_task_ids):
        tasks = load_tasks([30, 10, 20])
        assert [task.id for task in tasks] == [30, 10, 20]

    def test_missing_task(self, bundle_task_ids):
        with pytest.raises(NotFoundError):
            load_tasks([10, 999])


class TestSetTaskStatus:
    """Tests for set_task_status"""

    def test_sets_status_on_every_task(self, mapper, bundle_task_ids):
        tasks = load_tasks(bundle_task_ids)

        set_task_status(tasks, TaskStatus.FIXED, mapper)

        assert {task.status for task in load_tasks(bundle_task_ids)} == {TaskStatus.FIXED}

    def test_one_action_per_task(self, mapper, bundle_task_ids):
        tasks = load_tasks(bundle_task_ids)

        actions = set_task_status(tasks, TaskStatus.FIXED, mapper, bundle_id=4, primary_task_id=10)

        assert [action.item_id for action in actions] == bundle_task_ids
        assert Action.query.filter_by(kind=ActionKind.TASK_STATUS_SET).count() == 3
        assert actions[0].detail['bundle_id'] == 4
        assert actions[0].detail['primary_task_id'] == 10

    def test_completion_responses_forwarded(self, mapper, make_task):
        task = make_task()

        actions = set_task_status([task], TaskStatus.FIXED, mapper, completion_responses={'answer': 'yes'})

        assert actions[0].detail['completion_responses'] == {'answer': 'yes'}

    def test_credits_score(self, app, mapper, bundle_task_ids):
        set_task_status(load_tasks(bundle_task_ids), TaskStatus.FIXED, mapper)

        metrics = UserMetrics.query.get(mapper.id)
        assert metrics.score == 3 * app.config['SCORE_POINTS']['FIXED']
        assert metrics.total_fixed == 3

    def test_unscored_status_credits_nothing(self, mapper, make_task):
        set_task_status([make_task()], TaskStatus.DISABLED, mapper)

        metrics = UserMetrics.query.get(mapper.id)
        assert metrics.score == 0

    def test_request_review(self, mapper, make_task):
        task = make_task()

        set_task_status([task], TaskStatus.FIXED, mapper, request_review=True)

        task = Task.query.get(task.id)
        assert task.review_status == ReviewStatus.REQUESTED
        assert task.review_requested_by_id == mapper.id

    def test_request_review_defaults_to_user_setting(self, make_user, make_task):
        user = make_user(needs_review=True)
        task = make_task()

        set_task_status([task], TaskStatus.FIXED, user)

        assert Task.query.get(task.id).review_status == ReviewStatus.REQUESTED

    def test_no_review_requested(self, mapper, make_task):
        task = make_task()

        set_task_status([task], TaskStatus.FIXED, mapper, request_review=False)

        assert Task.query.get(task.id).review_status is None

    def test_invalid_status(self, mapper, make_task):
        task = make_task()

        with pytest.raises(InvalidArgumentError):
            set_task_status([task], 42, mapper)

        assert Action.query.count() == 0

    def test_partial_failure_keeps_earlier_tasks(self, mapper, bundle_task_ids, monkeypatch):
        real_credit = scoring.credit
        calls = []

        def failing_credit(user_id, status):
            calls.append(user_id)
            if len(calls) == 3:
                raise RuntimeError('ledger unavailable')
            return real_credit(user_id, status)

        monkeypatch.setattr(scoring, 'credit', failing_credit)

        with pytest.raises(RuntimeError):
            set_task_status(load_tasks(bundle_task_ids), TaskStatus.FIXED, mapper)
        db.session.rollback()

        statuses = [task.status for task in load_tasks(bundle_task_ids)]
        assert statuses == [TaskStatus.FIXED, TaskStatus.FIXED, TaskStatus.CREATED]

    def test_status_records_completing_user(self, mapper, make_task):
        task = make_task()

        set_task_status([task], TaskStatus.FIXED, mapper)

        assert Task.query.get(task.id).completed_by_id == mapper.id


class TestScoring:
    """Tests for the score ledger"""

    def test_rollback_reverses_credit(self, app, mapper):
        scoring.credit(mapper.id, TaskStatus.FALSE_POSITIVE)
        scoring.rollback(mapper.id, TaskStatus.FALSE_POSITIVE)
        db.session.commit()

        metrics = UserMetrics.query.get(mapper.id)
        assert metrics.score == 0
        assert metrics.total_false_positive == 0

    def test_counters_never_negative(self, mapper):
        scoring.rollback(mapper.id, TaskStatus.TOO_HARD)
        db.session.commit()

        assert UserMetrics.query.get(mapper.id).total_too_hard == 0

    def test_score_never_negative(self, mapper):
        scoring.rollback(mapper.id, TaskStatus.FIXED)
        db.session.commit()

        metrics = UserMetrics.query.get(mapper.id)
        assert metrics.score == 0
        assert metrics.total_fixed == 0
