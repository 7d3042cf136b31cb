"""
Tests for task bundle endpoints.
"""

from mapreview.constants import ActionKind, ItemType, ReviewStatus, TaskStatus
from mapreview.models import Action, ItemTag, Tag, UserMetrics


def _create_bundle(client, headers, task_ids, name='Bundle'):
    response = client.post('/api/taskbundles', json={'name': name, 'taskIds': task_ids}, headers=headers)
    assert response.status_code == 201
    return response.json


class TestCreateBundle:
    """Tests for POST /api/taskbundles"""

    def test_create_success(self, client, auth_headers, bundle_task_ids, mapper):
        data = _create_bundle(client, auth_headers, bundle_task_ids)

        assert data['task_ids'] == [10, 20, 30]
        assert data['primary_task_id'] is None
        assert data['owner_id'] == mapper.id
        assert [task['id'] for task in data['tasks']] == [10, 20, 30]

    def test_create_without_task_ids(self, client, auth_headers, db_session):
        response = client.post('/api/taskbundles', json={'name': 'Empty'}, headers=auth_headers)

        assert response.status_code == 400

    def test_create_with_unknown_task(self, client, auth_headers, bundle_task_ids):
        response = client.post('/api/taskbundles', json={'taskIds': [10, 555]}, headers=auth_headers)

        assert response.status_code == 404
        assert 'error' in response.json

    def test_create_unauthenticated(self, client, bundle_task_ids):
        response = client.post('/api/taskbundles', json={'taskIds': bundle_task_ids})

        assert response.status_code == 401

    def test_create_with_bad_token(self, client, bundle_task_ids):
        response = client.post(
            '/api/taskbundles',
            json={'taskIds': bundle_task_ids},
            headers={'Authorization': 'Bearer not-a-token'}
        )

        assert response.status_code == 401


class TestGetBundle:
    """Tests for GET /api/taskbundles/:id"""

    def test_get_success(self, client, auth_headers, bundle_task_ids):
        created = _create_bundle(client, auth_headers, bundle_task_ids)

        response = client.get(f'/api/taskbundles/{created["id"]}', headers=auth_headers)

        assert response.status_code == 200
        assert response.json['task_ids'] == [10, 20, 30]

    def test_get_not_found(self, client, auth_headers):
        response = client.get('/api/taskbundles/99999', headers=auth_headers)

        assert response.status_code == 404


class TestBundleStatus:
    """Tests for PUT /api/taskbundles/:id/:primaryId/status/:status"""

    def test_set_status_on_all_tasks(self, client, auth_headers, bundle_task_ids):
        created = _create_bundle(client, auth_headers, bundle_task_ids)

        response = client.put(
            f'/api/taskbundles/{created["id"]}/10/status/{TaskStatus.FIXED}',
            headers=auth_headers
        )

        assert response.status_code == 200
        assert [task['status'] for task in response.json['tasks']] == [TaskStatus.FIXED] * 3
        assert response.json['primary_task_id'] == 10
        assert Action.query.filter_by(kind=ActionKind.TASK_STATUS_SET).count() == 3

        refetched = client.get(f'/api/taskbundles/{created["id"]}', headers=auth_headers).json
        assert {task['status'] for task in refetched['tasks']} == {TaskStatus.FIXED}

    def test_request_review_and_completion_responses(self, client, auth_headers, bundle_task_ids):
        created = _create_bundle(client, auth_headers, bundle_task_ids)

        response = client.put(
            f'/api/taskbundles/{created["id"]}/20/status/{TaskStatus.FIXED}?requestReview=true',
            json={'answer': 'bridge'},
            headers=auth_headers
        )

        assert response.status_code == 200
        assert {task['review_status'] for task in response.json['tasks']} == {ReviewStatus.REQUESTED}
        action = Action.query.filter_by(kind=ActionKind.TASK_STATUS_SET).first()
        assert action.detail['completion_responses'] == {'answer': 'bridge'}

    def test_bad_request_review_flag(self, client, auth_headers, bundle_task_ids):
        created = _create_bundle(client, auth_headers, bundle_task_ids)

        response = client.put(
            f'/api/taskbundles/{created["id"]}/10/status/{TaskStatus.FIXED}?requestReview=maybe',
            headers=auth_headers
        )

        assert response.status_code == 400

    def test_invalid_status(self, client, auth_headers, bundle_task_ids):
        created = _create_bundle(client, auth_headers, bundle_task_ids)

        response = client.put(f'/api/taskbundles/{created["id"]}/10/status/42', headers=auth_headers)

        assert response.status_code == 400


class TestBundleReview:
    """Tests for bundle review and meta-review endpoints"""

    def test_review_with_tags(self, client, auth_headers, reviewer_headers, bundle_task_ids, existing_tag):
        created = _create_bundle(client, auth_headers, bundle_task_ids)
        client.put(f'/api/taskbundles/{created["id"]}/10/status/{TaskStatus.FIXED}', headers=auth_headers)

        response = client.put(
            f'/api/taskbundles/{created["id"]}/review/{ReviewStatus.APPROVED}?tags=foo,bar',
            headers=reviewer_headers
        )

        assert response.status_code == 200
        assert {task['review_status'] for task in response.json['tasks']} == {ReviewStatus.APPROVED}
        assert Tag.query.filter_by(name='bar').count() == 1
        assert Tag.query.count() == 2
        linked = {row.tag.name for row in ItemTag.query.filter_by(item_type=ItemType.TASK, item_id=created['id']).all()}
        assert linked == {'foo', 'bar'}

    def test_review_requires_reviewer(self, client, auth_headers, bundle_task_ids):
        created = _create_bundle(client, auth_headers, bundle_task_ids)

        response = client.put(
            f'/api/taskbundles/{created["id"]}/review/{ReviewStatus.APPROVED}',
            headers=auth_headers
        )

        assert response.status_code == 403

    def test_review_with_new_task_status(self, client, auth_headers, reviewer_headers, bundle_task_ids):
        created = _create_bundle(client, auth_headers, bundle_task_ids)

        response = client.put(
            f'/api/taskbundles/{created["id"]}/review/{ReviewStatus.APPROVED_WITH_REVISIONS}'
            f'?newTaskStatus={TaskStatus.ALREADY_FIXED}&comment=Revised',
            headers=reviewer_headers
        )

        assert response.status_code == 200
        assert {task['status'] for task in response.json['tasks']} == {TaskStatus.ALREADY_FIXED}

    def test_mapper_revises_own_bundle(self, app, client, auth_headers, bundle_task_ids, mapper):
        created = _create_bundle(client, auth_headers, bundle_task_ids)
        client.put(f'/api/taskbundles/{created["id"]}/10/status/{TaskStatus.FIXED}', headers=auth_headers)

        response = client.put(
            f'/api/taskbundles/{created["id"]}/review/{ReviewStatus.REQUESTED}'
            f'?newTaskStatus={TaskStatus.ALREADY_FIXED}',
            headers=auth_headers
        )

        assert response.status_code == 200
        assert {task['status'] for task in response.json['tasks']} == {TaskStatus.ALREADY_FIXED}
        metrics = UserMetrics.query.get(mapper.id)
        assert metrics.score == 3 * app.config['SCORE_POINTS']['ALREADY_FIXED']
        assert metrics.total_fixed == 0
        assert metrics.total_already_fixed == 3

    def test_reviewer_cannot_revise_mapper_work(
        self, app, client, auth_headers, reviewer_headers, bundle_task_ids, mapper, reviewer
    ):
        created = _create_bundle(client, auth_headers, bundle_task_ids)
        client.put(f'/api/taskbundles/{created["id"]}/10/status/{TaskStatus.FIXED}', headers=auth_headers)

        response = client.put(
            f'/api/taskbundles/{created["id"]}/review/{ReviewStatus.REQUESTED}'
            f'?newTaskStatus={TaskStatus.ALREADY_FIXED}',
            headers=reviewer_headers
        )

        assert response.status_code == 403
        assert UserMetrics.query.get(mapper.id).score == 3 * app.config['SCORE_POINTS']['FIXED']
        assert UserMetrics.query.get(reviewer.id) is None

    def test_meta_review(self, client, auth_headers, reviewer_headers, bundle_task_ids):
        created = _create_bundle(client, auth_headers, bundle_task_ids)

        response = client.put(
            f'/api/taskbundles/{created["id"]}/metareview/{ReviewStatus.REJECTED}?comment=Recheck',
            headers=reviewer_headers
        )

        assert response.status_code == 200
        assert {task['meta_review_status'] for task in response.json['tasks']} == {ReviewStatus.REJECTED}
        assert {task['status'] for task in response.json['tasks']} == {TaskStatus.CREATED}

    def test_review_missing_bundle(self, client, reviewer_headers):
        response = client.put(f'/api/taskbundles/4242/review/{ReviewStatus.APPROVED}', headers=reviewer_headers)

        assert response.status_code == 404


class TestUnbundleAndDelete:
    """Tests for unbundle and delete endpoints"""

    def test_unbundle_until_deleted(self, client, auth_headers, bundle_task_ids):
        created = _create_bundle(client, auth_headers, bundle_task_ids)
        bundle_id = created['id']

        response = client.post(f'/api/taskbundles/{bundle_id}/unbundle?taskIds=10', headers=auth_headers)
        assert response.status_code == 200
        assert response.json['task_ids'] == [20, 30]

        response = client.post(f'/api/taskbundles/{bundle_id}/unbundle?taskIds=20,30', headers=auth_headers)
        assert response.status_code == 200
        assert response.json == {'id': bundle_id, 'deleted': True}

        assert client.get(f'/api/taskbundles/{bundle_id}', headers=auth_headers).status_code == 404

    def test_unbundle_requires_ids(self, client, auth_headers, bundle_task_ids):
        created = _create_bundle(client, auth_headers, bundle_task_ids)

        response = client.post(f'/api/taskbundles/{created["id"]}/unbundle', headers=auth_headers)

        assert response.status_code == 400

    def test_unbundle_bad_ids(self, client, auth_headers, bundle_task_ids):
        created = _create_bundle(client, auth_headers, bundle_task_ids)

        response = client.post(f'/api/taskbundles/{created["id"]}/unbundle?taskIds=ten', headers=auth_headers)

        assert response.status_code == 400

    def test_delete_with_primary(self, client, auth_headers, bundle_task_ids, mapper):
        created = _create_bundle(client, auth_headers, bundle_task_ids)

        response = client.delete(f'/api/taskbundles/{created["id"]}?primaryId=10', headers=auth_headers)

        assert response.status_code == 200
        assert client.get(f'/api/taskbundles/{created["id"]}', headers=auth_headers).status_code == 404
        task = client.get('/api/tasks/10').json
        assert task['locked_by_id'] == mapper.id
        assert client.get('/api/tasks/20').json['locked_by_id'] is None
