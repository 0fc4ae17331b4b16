"""
API Tests for profile and password management
"""
from httpx import AsyncClient

from contest_portal.core.security import verify_password
from factories import TEST_PASSWORD


class TestProfile:

    async def test_get_profile(self, client: AsyncClient, test_user, auth_headers):
        response = await client.get('/api/v1/users/profile', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['data']['username'] == test_user.username

    async def test_update_profile(self, client: AsyncClient, auth_headers):
        response = await client.put(
            '/api/v1/users/profile',
            headers=auth_headers,
            json={'realName': 'New Name', 'phone': '13900000000', 'studentId': ' S-100 '},
        )

        assert response.status_code == 200
        body = response.json()
        assert body['message'] == 'Profile updated'
        assert body['data']['realName'] == 'New Name'
        assert body['data']['phone'] == '13900000000'
        assert body['data']['studentId'] == 'S-100'

    async def test_partial_update_keeps_other_fields(self, client: AsyncClient, test_user, auth_headers):
        phone = test_user.phone
        response = await client.put('/api/v1/users/profile', headers=auth_headers, json={'avatar': '/a.png'})

        data = response.json()['data']
        assert data['avatar'] == '/a.png'
        assert data['phone'] == phone

    async def test_student_id_taken(self, client: AsyncClient, other_user, auth_headers):
        response = await client.put(
            '/api/v1/users/profile',
            headers=auth_headers,
            json={'studentId': other_user.student_id},
        )

        assert response.status_code == 400
        assert response.json()['message'] == 'Student ID already exists'

    async def test_keeping_own_student_id(self, client: AsyncClient, test_user, auth_headers):
        response = await client.put(
            '/api/v1/users/profile',
            headers=auth_headers,
            json={'studentId': test_user.student_id},
        )
        assert response.status_code == 200

    async def test_profile_requires_auth(self, client: AsyncClient):
        response = await client.get('/api/v1/users/profile')
        assert response.status_code == 401


class TestChangePassword:

    async def test_change_password(self, client: AsyncClient, test_user, auth_headers):
        response = await client.put(
            '/api/v1/users/password',
            headers=auth_headers,
            json={'oldPassword': TEST_PASSWORD, 'newPassword': 'brand-new-1'},
        )

        assert response.status_code == 200
        assert response.json()['message'] == 'Password changed'
        assert verify_password('brand-new-1', test_user.hashed_password)

        login = await client.post(
            '/api/v1/auth/login',
            json={'login': test_user.email, 'password': 'brand-new-1'},
        )
        assert login.status_code == 200

    async def test_wrong_old_password(self, client: AsyncClient, auth_headers):
        response = await client.put(
            '/api/v1/users/password',
            headers=auth_headers,
            json={'oldPassword': 'not-it', 'newPassword': 'brand-new-1'},
        )

        assert response.status_code == 400
        assert response.json()['message'] == 'Old password is incorrect'

    async def test_new_password_too_short(self, client: AsyncClient, auth_headers):
        response = await client.put(
            '/api/v1/users/password',
            headers=auth_headers,
            json={'oldPassword': TEST_PASSWORD, 'newPassword': '123'},
        )
        assert response.status_code == 400
