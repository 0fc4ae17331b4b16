"""
API Tests for statistics and the Excel / ZIP exports
"""
import io
import zipfile
from httpx import AsyncClient
from openpyxl import load_workbook

from contest_portal.models import AwardLevel, AwardStatus, RegistrationStatus
from factories import bearer, make_award, make_competition, make_registration, make_user


def sheet(response):
    return load_workbook(io.BytesIO(response.content)).active


class TestStatistics:

    async def test_totals_and_breakdowns(self, client: AsyncClient, db_session, test_user, other_user, admin_auth_headers, open_competition):
        await make_registration(db_session, test_user, open_competition, RegistrationStatus.APPROVED)
        await make_registration(db_session, other_user, open_competition)
        await make_award(db_session, test_user, award_level=AwardLevel.NATIONAL)
        await make_award(db_session, other_user, award_level=AwardLevel.NATIONAL)
        await make_award(db_session, other_user, award_level=AwardLevel.SCHOOL)

        response = await client.get('/api/v1/admin/statistics', headers=admin_auth_headers)

        assert response.status_code == 200
        data = response.json()['data']
        assert data['totalUsers'] == 3
        assert data['totalCompetitions'] == 1
        assert data['totalRegistrations'] == 2
        assert data['totalAwards'] == 3
        assert data['awardsByLevel'] == {'school': 1, 'provincial': 0, 'national': 2, 'college': 0}
        assert data['registrationsByStatus'] == {'pending': 1, 'approved': 1, 'rejected': 0, 'cancelled': 0}

    async def test_empty_breakdowns_are_zero_filled(self, client: AsyncClient, admin_auth_headers):
        response = await client.get('/api/v1/admin/statistics', headers=admin_auth_headers)

        data = response.json()['data']
        assert data['totalUsers'] == 1
        assert set(data['awardsByLevel'].values()) == {0}
        assert set(data['registrationsByStatus'].values()) == {0}

    async def test_forbidden_for_users(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/v1/admin/statistics', headers=auth_headers)
        assert response.status_code == 403


class TestAwardExport:

    async def test_export_all(self, client: AsyncClient, db_session, test_user, admin_auth_headers, open_competition):
        await make_award(db_session, test_user, open_competition, award_name='Linked')
        await make_award(db_session, test_user, award_name='Standalone', status=AwardStatus.APPROVED)

        response = await client.get('/api/v1/admin/export/awards.xlsx', headers=admin_auth_headers)

        assert response.status_code == 200
        assert response.headers['content-type'].startswith(
            'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        assert response.headers['x-export-count'] == '2'
        assert 'attachment; filename="awards-' in response.headers['content-disposition']

        ws = sheet(response)
        assert ws.max_row == 3
        assert ws.cell(row=1, column=10).value == 'Award Name'
        names = {ws.cell(row=r, column=10).value for r in (2, 3)}
        assert names == {'Linked', 'Standalone'}

    async def test_export_filtered(self, client: AsyncClient, db_session, test_user, admin_auth_headers):
        await make_award(db_session, test_user, award_name='Pending')
        await make_award(db_session, test_user, award_name='Approved', status=AwardStatus.APPROVED)

        response = await client.get(
            '/api/v1/admin/export/awards.xlsx', headers=admin_auth_headers, params={'status': 'approved'}
        )

        ws = sheet(response)
        assert ws.max_row == 2
        assert ws.cell(row=2, column=10).value == 'Approved'

    async def test_export_empty(self, client: AsyncClient, admin_auth_headers):
        response = await client.get('/api/v1/admin/export/awards.xlsx', headers=admin_auth_headers)

        assert response.headers['x-export-count'] == '0'
        assert sheet(response).max_row == 1


class TestRegistrationExport:

    async def test_export_by_competition(self, client: AsyncClient, db_session, admin_user, test_user, other_user, admin_auth_headers):
        first = await make_competition(db_session, admin_user, title='First Cup')
        second = await make_competition(db_session, admin_user, title='Second Cup')
        await make_registration(db_session, test_user, first, RegistrationStatus.APPROVED)
        await make_registration(db_session, other_user, first)
        await make_registration(db_session, test_user, second)

        response = await client.get(
            '/api/v1/admin/export/registrations.xlsx',
            headers=admin_auth_headers,
            params={'competitionId': first.id},
        )

        assert response.headers['x-export-count'] == '2'
        ws = sheet(response)
        assert [ws.cell(row=r, column=3).value for r in (2, 3)] == ['First Cup', 'First Cup']

    async def test_forbidden_for_users(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/v1/admin/export/registrations.xlsx', headers=auth_headers)
        assert response.status_code == 403


class TestMaterialsArchive:

    async def upload(self, client, registration_id, user, files):
        response = await client.post(
            f'/api/v1/registrations/{registration_id}/materials',
            headers=bearer(user),
            files=[('files', f) for f in files],
        )
        assert response.status_code == 200

    async def test_archive_layout(self, client: AsyncClient, db_session, admin_user, admin_auth_headers):
        competition = await make_competition(db_session, admin_user, title='Design: Finals')
        alice = await make_user(db_session, real_name='Alice', student_id='S001')
        bob = await make_user(db_session, real_name='Bob', student_id=None)
        alice_registration = await make_registration(db_session, alice, competition)
        bob_registration = await make_registration(db_session, bob, competition)
        bob_id = bob.id

        await self.upload(client, alice_registration.id, alice, [
            ('plan.pdf', b'plan', 'application/pdf'),
            ('plan.pdf', b'plan v2', 'application/pdf'),
        ])
        await self.upload(client, bob_registration.id, bob, [('poster.png', b'png', 'image/png')])

        response = await client.get(
            f'/api/v1/admin/export/competition/{competition.id}/materials.zip',
            headers=admin_auth_headers,
        )

        assert response.status_code == 200
        assert response.headers['content-type'] == 'application/zip'
        assert response.headers['x-export-count'] == '3'
        assert 'filename="Design_ Finals.zip"' in response.headers['content-disposition']

        with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
            names = sorted(archive.namelist())
            assert names == sorted([
                'Design_ Finals/Alice_S001/plan.pdf',
                'Design_ Finals/Alice_S001/plan (2).pdf',
                f'Design_ Finals/Bob_{bob_id}/poster.png',
            ])
            assert archive.read('Design_ Finals/Alice_S001/plan (2).pdf') == b'plan v2'

    async def test_archive_without_materials(self, client: AsyncClient, db_session, test_user, admin_auth_headers, open_competition):
        await make_registration(db_session, test_user, open_competition)

        response = await client.get(
            f'/api/v1/admin/export/competition/{open_competition.id}/materials.zip',
            headers=admin_auth_headers,
        )

        assert response.headers['x-export-count'] == '0'
        with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
            assert archive.namelist() == []

    async def test_unknown_competition(self, client: AsyncClient, admin_auth_headers):
        response = await client.get(
            '/api/v1/admin/export/competition/9999/materials.zip', headers=admin_auth_headers
        )
        assert response.status_code == 404
