"""
API Tests for the competition catalog and its administration
"""
from datetime import datetime, timedelta
from httpx import AsyncClient
from sqlalchemy import select

from contest_portal.models import Award, CompetitionStatus, Registration, RegistrationStatus
from factories import make_award, make_competition, make_registration, make_user


def competition_payload(**overrides):
    start = datetime(2026, 9, 1, 8, 0)
    data = {
        'title': 'Algorithm Cup',
        'description': 'Annual programming contest',
        'type': 'programming',
        'registrationStart': start.isoformat(),
        'registrationEnd': (start + timedelta(days=14)).isoformat(),
        'startTime': (start + timedelta(days=20)).isoformat(),
        'endTime': (start + timedelta(days=21)).isoformat(),
        'maxParticipants': 50,
        'requirements': {'teamSize': 3},
        'rules': ['No plagiarism'],
        'awards': [{'rank': 1, 'prize': 'Trophy'}],
    }
    data.update(overrides)
    return data


class TestListCompetitions:

    async def test_public_list_with_pagination(self, client: AsyncClient, db_session, admin_user):
        for _ in range(3):
            await make_competition(db_session, admin_user)

        response = await client.get('/api/v1/competitions', params={'page': 1, 'limit': 2})

        assert response.status_code == 200
        data = response.json()['data']
        assert len(data['competitions']) == 2
        assert data['pagination'] == {'page': 1, 'limit': 2, 'total': 3, 'totalPages': 2}
        assert data['competitions'][0]['creator']['id'] == admin_user.id

    async def test_search_matches_title_and_description(self, client: AsyncClient, db_session, admin_user):
        await make_competition(db_session, admin_user, title='Robotics Open', description='build robots')
        await make_competition(db_session, admin_user, title='Math Olympiad', description='ROBOT themed puzzles')
        await make_competition(db_session, admin_user, title='Essay Contest', description='writing')

        response = await client.get('/api/v1/competitions', params={'search': 'robot'})

        titles = {c['title'] for c in response.json()['data']['competitions']}
        assert titles == {'Robotics Open', 'Math Olympiad'}

    async def test_filter_by_type_and_status(self, client: AsyncClient, db_session, admin_user):
        await make_competition(db_session, admin_user, title='A', type='math')
        await make_competition(db_session, admin_user, title='B', type='math', status=CompetitionStatus.CLOSED)
        await make_competition(db_session, admin_user, title='C', type='design')

        response = await client.get('/api/v1/competitions', params={'type': 'math', 'status': 'open'})

        competitions = response.json()['data']['competitions']
        assert [c['title'] for c in competitions] == ['A']

    async def test_sort_by_title(self, client: AsyncClient, db_session, admin_user):
        for title in ('Charlie', 'Alpha', 'Bravo'):
            await make_competition(db_session, admin_user, title=title)

        response = await client.get('/api/v1/competitions', params={'sortBy': 'title', 'sortOrder': 'asc'})

        titles = [c['title'] for c in response.json()['data']['competitions']]
        assert titles == ['Alpha', 'Bravo', 'Charlie']

    async def test_unknown_sort_field_rejected(self, client: AsyncClient):
        response = await client.get('/api/v1/competitions', params={'sortBy': 'password'})
        assert response.status_code == 400

    async def test_limit_out_of_range(self, client: AsyncClient):
        response = await client.get('/api/v1/competitions', params={'limit': 1000})
        assert response.status_code == 400


class TestCompetitionDetail:

    async def test_detail_counts(self, client: AsyncClient, db_session, admin_user, open_competition):
        approved = await make_user(db_session)
        pending = await make_user(db_session)
        await make_registration(db_session, approved, open_competition, RegistrationStatus.APPROVED)
        await make_registration(db_session, pending, open_competition)

        response = await client.get(f'/api/v1/competitions/{open_competition.id}')

        assert response.status_code == 200
        data = response.json()['data']
        assert data['id'] == open_competition.id
        assert data['registrationCount'] == 2
        assert data['approvedCount'] == 1
        assert data['creator']['username'] == admin_user.username

    async def test_detail_not_found(self, client: AsyncClient):
        response = await client.get('/api/v1/competitions/9999')

        assert response.status_code == 404
        assert response.json()['code'] == 'COMPETITION_NOT_FOUND'


class TestManageCompetitions:

    async def test_create(self, client: AsyncClient, admin_user, admin_auth_headers):
        response = await client.post(
            '/api/v1/competitions', headers=admin_auth_headers, json=competition_payload()
        )

        assert response.status_code == 201
        body = response.json()
        assert body['message'] == 'Competition created'
        data = body['data']
        assert data['title'] == 'Algorithm Cup'
        assert data['status'] == 'draft'
        assert data['currentParticipants'] == 0
        assert data['createdBy'] == admin_user.id
        assert data['requirements'] == {'teamSize': 3}
        assert data['rules'] == ['No plagiarism']
        assert data['awards'] == [{'rank': 1, 'prize': 'Trophy'}]

    async def test_create_defaults_type(self, client: AsyncClient, admin_auth_headers):
        payload = competition_payload()
        del payload['type']
        response = await client.post('/api/v1/competitions', headers=admin_auth_headers, json=payload)

        assert response.json()['data']['type'] == 'other'

    async def test_create_rejects_inverted_window(self, client: AsyncClient, admin_auth_headers):
        payload = competition_payload(registrationEnd='2026-08-01T00:00:00')
        response = await client.post('/api/v1/competitions', headers=admin_auth_headers, json=payload)

        assert response.status_code == 400
        assert 'registrationStart must not be after registrationEnd' in response.json()['message']

    async def test_regular_user_cannot_create(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/v1/competitions', headers=auth_headers, json=competition_payload())

        assert response.status_code == 403
        assert response.json()['code'] == 'FORBIDDEN'

    async def test_anonymous_cannot_create(self, client: AsyncClient):
        response = await client.post('/api/v1/competitions', json=competition_payload())
        assert response.status_code == 401

    async def test_update_partial(self, client: AsyncClient, admin_auth_headers, open_competition):
        response = await client.put(
            f'/api/v1/competitions/{open_competition.id}',
            headers=admin_auth_headers,
            json={'title': 'Renamed', 'status': 'closed', 'maxParticipants': 10},
        )

        assert response.status_code == 200
        data = response.json()['data']
        assert data['title'] == 'Renamed'
        assert data['status'] == 'closed'
        assert data['maxParticipants'] == 10
        assert data['type'] == 'programming'

    async def test_update_rejects_window_against_stored_value(
        self, client: AsyncClient, admin_auth_headers, open_competition
    ):
        too_late = (open_competition.end_time + timedelta(days=1)).isoformat()
        response = await client.put(
            f'/api/v1/competitions/{open_competition.id}',
            headers=admin_auth_headers,
            json={'startTime': too_late},
        )

        assert response.status_code == 400
        assert response.json()['message'] == 'startTime must not be after endTime'

    async def test_update_rejects_null_title(self, client: AsyncClient, admin_auth_headers, open_competition):
        response = await client.put(
            f'/api/v1/competitions/{open_competition.id}',
            headers=admin_auth_headers,
            json={'title': None},
        )
        assert response.status_code == 400

    async def test_update_missing(self, client: AsyncClient, admin_auth_headers):
        response = await client.put('/api/v1/competitions/9999', headers=admin_auth_headers, json={'title': 'x'})
        assert response.status_code == 404

    async def test_delete_removes_registrations_and_unlinks_awards(
        self, client: AsyncClient, db_session, test_user, admin_auth_headers, open_competition
    ):
        competition_id = open_competition.id
        await make_registration(db_session, test_user, open_competition)
        award = await make_award(db_session, test_user, open_competition)
        award_id = award.id

        response = await client.delete(f'/api/v1/competitions/{competition_id}', headers=admin_auth_headers)

        assert response.status_code == 200
        assert response.json()['message'] == 'Competition deleted'

        remaining = await db_session.execute(
            select(Registration).where(Registration.competition_id == competition_id)
        )
        assert remaining.scalars().all() == []

        result = await db_session.execute(
            select(Award).where(Award.id == award_id).execution_options(populate_existing=True)
        )
        assert result.scalar_one().competition_id is None

        missing = await client.get(f'/api/v1/competitions/{competition_id}')
        assert missing.status_code == 404
