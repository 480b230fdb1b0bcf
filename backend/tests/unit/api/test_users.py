"""
Unit Tests for User Administration Endpoints
"""
from unittest.mock import AsyncMock
import pytest
from httpx import AsyncClient


class TestAccess:

    @pytest.mark.asyncio
    async def test_admin_lists_users_without_passwords(self, admin_client: AsyncClient):
        response = await admin_client.get('/api/users')

        assert response.status_code == 200
        users = response.json()
        assert [u['username'] for u in users] == ['admin', 'teacher', 'student']
        assert all('password' not in u for u in users)

    @pytest.mark.asyncio
    async def test_teacher_forbidden(self, teacher_client: AsyncClient):
        assert (await teacher_client.get('/api/users')).status_code == 403
        assert (await teacher_client.delete('/api/users/3')).status_code == 403

    @pytest.mark.asyncio
    async def test_student_forbidden(self, student_client: AsyncClient):
        assert (await student_client.get('/api/users')).status_code == 403
        assert (await student_client.patch('/api/users/3', json={'role': 'admin'})).status_code == 403

    @pytest.mark.asyncio
    async def test_anonymous_unauthenticated(self, client: AsyncClient):
        assert (await client.get('/api/users')).status_code == 401

    @pytest.mark.asyncio
    async def test_get_single_and_missing(self, admin_client: AsyncClient):
        assert (await admin_client.get('/api/users/2')).json()['username'] == 'teacher'
        assert (await admin_client.get('/api/users/999')).status_code == 404


class TestCreateUser:

    @pytest.mark.asyncio
    async def test_admin_creates_account(self, admin_client: AsyncClient, client_factory, storage, user_data):
        user_data['role'] = 'teacher'

        response = await admin_client.post('/api/users', json=user_data)

        assert response.status_code == 201
        assert response.json()['role'] == 'teacher'
        stored = await storage.get_user_by_username(user_data['username'])
        assert stored.password != user_data['password']
        # the new account can log in with the password the admin chose
        await client_factory(user_data['username'], user_data['password'])

    @pytest.mark.asyncio
    async def test_duplicate_username(self, admin_client: AsyncClient, user_data):
        user_data['username'] = 'teacher'

        response = await admin_client.post('/api/users', json=user_data)

        assert response.status_code == 409


class TestUpdateUser:

    @pytest.mark.asyncio
    async def test_partial_update(self, admin_client: AsyncClient):
        response = await admin_client.patch('/api/users/2', json={'name': 'Alexandra Johnson'})

        assert response.status_code == 200
        assert response.json() == {'id': 2, 'username': 'teacher', 'name': 'Alexandra Johnson', 'role': 'teacher'}

    @pytest.mark.asyncio
    async def test_password_change_retires_demo_password(self, admin_client: AsyncClient, client, storage):
        response = await admin_client.patch('/api/users/3', json={'password': 'n3w-pass'})

        assert response.status_code == 200
        assert (await storage.get_user(3)).password.count('.') == 1

        old = await client.post('/api/login', json={'username': 'student', 'password': 'password'})
        new = await client.post('/api/login', json={'username': 'student', 'password': 'n3w-pass'})
        assert old.status_code == 401
        assert new.status_code == 200

    @pytest.mark.asyncio
    async def test_rename_onto_taken_username(self, admin_client: AsyncClient):
        response = await admin_client.patch('/api/users/3', json={'username': 'teacher'})

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_invalid_role(self, admin_client: AsyncClient):
        response = await admin_client.patch('/api/users/3', json={'role': 'janitor'})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_missing(self, admin_client: AsyncClient):
        assert (await admin_client.patch('/api/users/999', json={'name': 'x'})).status_code == 404
        assert (await admin_client.patch('/api/users/999', json={})).status_code == 404


class TestDeleteUser:

    @pytest.mark.asyncio
    async def test_delete_other_user(self, admin_client: AsyncClient, storage):
        response = await admin_client.delete('/api/users/3')

        assert response.status_code == 200
        assert response.json() == {'message': 'User deleted successfully'}
        assert await storage.get_user(3) is None
        assert (await admin_client.delete('/api/users/3')).status_code == 404

    @pytest.mark.asyncio
    async def test_self_deletion_refused(self, admin_client: AsyncClient, storage):
        spy = AsyncMock(wraps=storage.delete_user)
        storage.delete_user = spy

        response = await admin_client.delete('/api/users/1')

        assert response.status_code == 400
        assert response.json()['message'] == 'Cannot delete your own account'
        spy.assert_not_awaited()
        assert await storage.get_user(1) is not None
        assert (await admin_client.get('/api/user')).status_code == 200
