"""
Unit Tests for Announcement API Endpoints
"""
import pytest
from httpx import AsyncClient


class TestListAnnouncements:

    @pytest.mark.asyncio
    async def test_requires_login(self, client: AsyncClient):
        response = await client.get('/api/announcements')

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_student_can_read(self, student_client: AsyncClient, teacher_client: AsyncClient, announcement_data):
        created = (await teacher_client.post('/api/announcements', json=announcement_data)).json()

        response = await student_client.get('/api/announcements')

        assert response.status_code == 200
        assert response.json() == [created]

    @pytest.mark.asyncio
    async def test_get_by_id(self, student_client: AsyncClient, teacher_client: AsyncClient, announcement_data):
        created = (await teacher_client.post('/api/announcements', json=announcement_data)).json()

        response = await student_client.get(f"/api/announcements/{created['id']}")

        assert response.status_code == 200
        assert response.json()['title'] == announcement_data['title']

    @pytest.mark.asyncio
    async def test_get_missing(self, student_client: AsyncClient):
        response = await student_client.get('/api/announcements/999')

        assert response.status_code == 404
        assert response.json()['message'] == 'Announcement not found'


class TestCreateAnnouncement:

    @pytest.mark.asyncio
    async def test_teacher_creates(self, teacher_client: AsyncClient, announcement_data):
        response = await teacher_client.post('/api/announcements', json=announcement_data)

        assert response.status_code == 201
        data = response.json()
        assert data['id'] > 0
        assert data['authorId'] == 2
        assert data['createdAt'].endswith('Z')
        assert data['important'] is False
        assert data['audience'] == 'all'

    @pytest.mark.asyncio
    async def test_admin_creates(self, admin_client: AsyncClient, announcement_data):
        response = await admin_client.post('/api/announcements', json=announcement_data)

        assert response.status_code == 201
        assert response.json()['authorId'] == 1

    @pytest.mark.asyncio
    async def test_student_forbidden(self, student_client: AsyncClient, storage, announcement_data):
        response = await student_client.post('/api/announcements', json=announcement_data)

        assert response.status_code == 403
        assert response.json()['message'] == 'Unauthorized role'
        assert await storage.list_announcements() == []

    @pytest.mark.asyncio
    async def test_anonymous_rejected_before_validation(self, client: AsyncClient):
        response = await client.post('/api/announcements', json={})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_title(self, teacher_client: AsyncClient, announcement_data):
        del announcement_data['title']

        response = await teacher_client.post('/api/announcements', json=announcement_data)

        assert response.status_code == 400
        data = response.json()
        assert data['message'] == 'Invalid data'
        assert data['errors'][0]['field'] == 'title'

    @pytest.mark.asyncio
    async def test_client_cannot_choose_author(self, teacher_client: AsyncClient, announcement_data):
        response = await teacher_client.post('/api/announcements', json={**announcement_data, 'authorId': 1})

        assert response.json()['authorId'] == 2


class TestDeleteAnnouncement:

    @pytest.mark.asyncio
    async def test_delete(self, teacher_client: AsyncClient, announcement_data):
        created = (await teacher_client.post('/api/announcements', json=announcement_data)).json()

        response = await teacher_client.delete(f"/api/announcements/{created['id']}")

        assert response.status_code == 204
        assert (await teacher_client.get(f"/api/announcements/{created['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_any_staff_may_delete(self, teacher_client: AsyncClient, admin_client: AsyncClient, announcement_data):
        created = (await admin_client.post('/api/announcements', json=announcement_data)).json()

        response = await teacher_client.delete(f"/api/announcements/{created['id']}")

        assert response.status_code == 204

    @pytest.mark.asyncio
    async def test_student_forbidden(self, student_client: AsyncClient, teacher_client: AsyncClient, announcement_data):
        created = (await teacher_client.post('/api/announcements', json=announcement_data)).json()

        response = await student_client.delete(f"/api/announcements/{created['id']}")

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_missing(self, teacher_client: AsyncClient):
        response = await teacher_client.delete('/api/announcements/999')

        assert response.status_code == 404
