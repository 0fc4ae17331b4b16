"""
API Tests for competition registration and material uploads
"""
from datetime import datetime, timedelta
from httpx import AsyncClient

from contest_portal.core.config import settings
from contest_portal.models import RegistrationStatus
from contest_portal.services import registration_service
from factories import make_competition, make_registration


def pdf(name='report.pdf', content=b'%PDF-1.4 test'):
    return ('files', (name, content, 'application/pdf'))


class TestCreateRegistration:

    async def test_register_for_open_competition(self, client: AsyncClient, test_user, auth_headers, open_competition):
        response = await client.post(
            '/api/v1/registrations',
            headers=auth_headers,
            json={
                'competitionId': open_competition.id,
                'registrationData': {'teamName': 'Ducks', 'members': 3},
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body['message'] == 'Registration submitted'
        data = body['data']
        assert data['status'] == 'pending'
        assert data['userId'] == test_user.id
        assert data['registrationData'] == {'teamName': 'Ducks', 'members': 3}
        assert data['attachments'] == []
        assert data['competition']['id'] == open_competition.id

    async def test_duplicate_registration(self, client: AsyncClient, auth_headers, open_competition):
        payload = {'competitionId': open_competition.id}
        first = await client.post('/api/v1/registrations', headers=auth_headers, json=payload)
        assert first.status_code == 201

        second = await client.post('/api/v1/registrations', headers=auth_headers, json=payload)

        assert second.status_code == 400
        assert second.json()['code'] == 'CONFLICT'

    async def test_attachments_limited_to_own_materials(
        self, client: AsyncClient, test_user, other_user, auth_headers, open_competition
    ):
        prefix = f'{settings.UPLOAD_URL_PREFIX}/materials/{open_competition.id}'
        foreign = {'url': f'{prefix}/{other_user.id}/plan.pdf', 'originalName': 'plan.pdf'}
        own = {'url': f'{prefix}/{test_user.id}/plan.pdf', 'originalName': 'plan.pdf'}

        rejected = await client.post(
            '/api/v1/registrations',
            headers=auth_headers,
            json={'competitionId': open_competition.id, 'attachments': [foreign]},
        )
        assert rejected.status_code == 400
        assert rejected.json()['code'] == 'VALIDATION_ERROR'

        accepted = await client.post(
            '/api/v1/registrations',
            headers=auth_headers,
            json={'competitionId': open_competition.id, 'attachments': [own]},
        )
        assert accepted.status_code == 201
        assert accepted.json()['data']['attachments'][0]['url'] == own['url']

    async def test_duplicate_caught_by_unique_constraint(
        self, client: AsyncClient, db_session, test_user, auth_headers, open_competition, monkeypatch
    ):
        await make_registration(db_session, test_user, open_competition)
        competition_id = open_competition.id

        async def not_registered(db, user_id, competition_id):
            return False

        monkeypatch.setattr(registration_service, 'already_registered', not_registered)

        response = await client.post(
            '/api/v1/registrations', headers=auth_headers, json={'competitionId': competition_id}
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'CONFLICT'

        mine = await client.get('/api/v1/registrations/my', headers=auth_headers)
        assert mine.json()['data']['pagination']['total'] == 1

    async def test_duplicate_even_after_cancel(
        self, client: AsyncClient, db_session, test_user, auth_headers, open_competition
    ):
        await make_registration(db_session, test_user, open_competition, RegistrationStatus.CANCELLED)

        response = await client.post(
            '/api/v1/registrations', headers=auth_headers, json={'competitionId': open_competition.id}
        )
        assert response.status_code == 400

    async def test_before_registration_window(self, client: AsyncClient, db_session, admin_user, auth_headers):
        now = datetime.utcnow()
        competition = await make_competition(
            db_session, admin_user,
            registration_start=now + timedelta(days=1),
            registration_end=now + timedelta(days=2),
        )

        response = await client.post(
            '/api/v1/registrations', headers=auth_headers, json={'competitionId': competition.id}
        )

        assert response.status_code == 400
        assert response.json()['message'] == 'Not within the registration period'

    async def test_after_registration_window(self, client: AsyncClient, db_session, admin_user, auth_headers):
        now = datetime.utcnow()
        competition = await make_competition(
            db_session, admin_user,
            registration_start=now - timedelta(days=3),
            registration_end=now - timedelta(days=2),
        )

        response = await client.post(
            '/api/v1/registrations', headers=auth_headers, json={'competitionId': competition.id}
        )
        assert response.status_code == 400

    async def test_full_competition(self, client: AsyncClient, db_session, admin_user, other_user, auth_headers):
        competition = await make_competition(db_session, admin_user, max_participants=1)
        await make_registration(db_session, other_user, competition, RegistrationStatus.APPROVED)

        response = await client.post(
            '/api/v1/registrations', headers=auth_headers, json={'competitionId': competition.id}
        )

        assert response.status_code == 400
        body = response.json()
        assert body['code'] == 'CAPACITY_EXCEEDED'
        assert body['message'] == 'Registration is full'

    async def test_pending_registrations_do_not_fill_capacity(
        self, client: AsyncClient, db_session, admin_user, other_user, auth_headers
    ):
        competition = await make_competition(db_session, admin_user, max_participants=1)
        await make_registration(db_session, other_user, competition)

        response = await client.post(
            '/api/v1/registrations', headers=auth_headers, json={'competitionId': competition.id}
        )
        assert response.status_code == 201

    async def test_unknown_competition(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/v1/registrations', headers=auth_headers, json={'competitionId': 9999})
        assert response.status_code == 404

    async def test_requires_auth(self, client: AsyncClient, open_competition):
        response = await client.post('/api/v1/registrations', json={'competitionId': open_competition.id})
        assert response.status_code == 401


class TestReadRegistrations:

    async def test_my_registrations(self, client: AsyncClient, db_session, admin_user, test_user, other_user, auth_headers):
        first = await make_competition(db_session, admin_user)
        second = await make_competition(db_session, admin_user)
        await make_registration(db_session, test_user, first)
        await make_registration(db_session, test_user, second, RegistrationStatus.APPROVED)
        await make_registration(db_session, other_user, first)

        response = await client.get('/api/v1/registrations/my', headers=auth_headers)

        data = response.json()['data']
        assert data['pagination']['total'] == 2
        assert {r['userId'] for r in data['registrations']} == {test_user.id}

        filtered = await client.get('/api/v1/registrations/my', headers=auth_headers, params={'status': 'approved'})
        registrations = filtered.json()['data']['registrations']
        assert [r['competitionId'] for r in registrations] == [second.id]

    async def test_owner_can_read(self, client: AsyncClient, db_session, test_user, auth_headers, open_competition):
        registration = await make_registration(db_session, test_user, open_competition)

        response = await client.get(f'/api/v1/registrations/{registration.id}', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['data']['user']['id'] == test_user.id

    async def test_other_user_cannot_read(self, client: AsyncClient, db_session, other_user, auth_headers, open_competition):
        registration = await make_registration(db_session, other_user, open_competition)

        response = await client.get(f'/api/v1/registrations/{registration.id}', headers=auth_headers)
        assert response.status_code == 403

    async def test_admin_can_read(self, client: AsyncClient, db_session, test_user, admin_auth_headers, open_competition):
        registration = await make_registration(db_session, test_user, open_competition)

        response = await client.get(f'/api/v1/registrations/{registration.id}', headers=admin_auth_headers)
        assert response.status_code == 200

    async def test_missing_registration(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/v1/registrations/9999', headers=auth_headers)
        assert response.status_code == 404


class TestCancelRegistration:

    async def test_cancel(self, client: AsyncClient, db_session, test_user, auth_headers, open_competition):
        registration = await make_registration(db_session, test_user, open_competition)

        response = await client.delete(f'/api/v1/registrations/{registration.id}', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['data']['status'] == 'cancelled'

        again = await client.delete(f'/api/v1/registrations/{registration.id}', headers=auth_headers)
        assert again.status_code == 400
        assert again.json()['message'] == 'Registration already cancelled'

    async def test_cancel_approved_keeps_counter(
        self, client: AsyncClient, db_session, test_user, auth_headers, admin_user
    ):
        competition = await make_competition(db_session, admin_user, current_participants=1)
        registration = await make_registration(db_session, test_user, competition, RegistrationStatus.APPROVED)

        await client.delete(f'/api/v1/registrations/{registration.id}', headers=auth_headers)

        detail = await client.get(f'/api/v1/competitions/{competition.id}')
        assert detail.json()['data']['currentParticipants'] == 1
        assert detail.json()['data']['approvedCount'] == 0

    async def test_cannot_cancel_others(self, client: AsyncClient, db_session, other_user, auth_headers, open_competition):
        registration = await make_registration(db_session, other_user, open_competition)

        response = await client.delete(f'/api/v1/registrations/{registration.id}', headers=auth_headers)
        assert response.status_code == 403

    async def test_admin_cannot_cancel_for_user(
        self, client: AsyncClient, db_session, test_user, admin_auth_headers, open_competition
    ):
        registration = await make_registration(db_session, test_user, open_competition)

        response = await client.delete(f'/api/v1/registrations/{registration.id}', headers=admin_auth_headers)
        assert response.status_code == 403


class TestMaterials:

    async def test_upload_materials(self, client: AsyncClient, db_session, test_user, auth_headers, open_competition):
        registration = await make_registration(db_session, test_user, open_competition)

        response = await client.post(
            f'/api/v1/registrations/{registration.id}/materials',
            headers=auth_headers,
            files=[pdf('plan.pdf'), ('files', ('slides.png', b'\x89PNG', 'image/png'))],
        )

        assert response.status_code == 200
        attachments = response.json()['data']['attachments']
        assert [a['originalName'] for a in attachments] == ['plan.pdf', 'slides.png']

        prefix = f'{settings.UPLOAD_URL_PREFIX}/materials/{open_competition.id}/{test_user.id}/'
        assert all(a['url'].startswith(prefix) for a in attachments)
        assert attachments[0]['mime'] == 'application/pdf'
        assert attachments[0]['size'] == len(b'%PDF-1.4 test')

    async def test_uploads_append(self, client: AsyncClient, db_session, test_user, auth_headers, open_competition):
        registration = await make_registration(db_session, test_user, open_competition)
        url = f'/api/v1/registrations/{registration.id}/materials'

        await client.post(url, headers=auth_headers, files=[pdf('one.pdf')])
        response = await client.post(url, headers=auth_headers, files=[pdf('two.pdf')])

        names = [a['originalName'] for a in response.json()['data']['attachments']]
        assert names == ['one.pdf', 'two.pdf']

    async def test_rejected_file_keeps_earlier_ones(
        self, client: AsyncClient, db_session, test_user, auth_headers, open_competition
    ):
        registration = await make_registration(db_session, test_user, open_competition)

        response = await client.post(
            f'/api/v1/registrations/{registration.id}/materials',
            headers=auth_headers,
            files=[
                pdf('first.pdf'),
                ('files', ('virus.exe', b'MZ', 'application/x-msdownload')),
                pdf('third.pdf'),
            ],
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_FILE_TYPE'

        detail = await client.get(f'/api/v1/registrations/{registration.id}', headers=auth_headers)
        names = [a['originalName'] for a in detail.json()['data']['attachments']]
        assert names == ['first.pdf']

    async def test_only_owner_uploads(self, client: AsyncClient, db_session, other_user, auth_headers, open_competition):
        registration = await make_registration(db_session, other_user, open_competition)

        response = await client.post(
            f'/api/v1/registrations/{registration.id}/materials',
            headers=auth_headers,
            files=[pdf()],
        )
        assert response.status_code == 403

    async def test_too_many_files(self, client: AsyncClient, db_session, test_user, auth_headers, open_competition):
        registration = await make_registration(db_session, test_user, open_competition)

        response = await client.post(
            f'/api/v1/registrations/{registration.id}/materials',
            headers=auth_headers,
            files=[pdf(f'{i}.pdf') for i in range(settings.MAX_MATERIAL_FILES + 1)],
        )
        assert response.status_code == 400
