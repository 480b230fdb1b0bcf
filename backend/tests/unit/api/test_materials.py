"""
Unit Tests for Material API Endpoints
Tests for: multipart upload, link-only materials, orphan cleanup, ownership
"""
from pathlib import Path
from unittest.mock import AsyncMock
import pytest
import pytest_asyncio
from httpx import AsyncClient

from app.core.exceptions import StorageError
from app.core.security import hash_password
from app.models.user import UserRole
from app.schemas.user import UserCreate

PDF_BYTES = b'%PDF-1.4 lesson notes'


def stored_files(upload_dir: Path) -> list:
    if not upload_dir.exists():
        return []
    return sorted(p.name for p in upload_dir.iterdir())


def form(**overrides) -> dict:
    data = {'title': 'Fractions', 'description': 'Worksheet for chapter 3', 'classId': '10A'}
    data.update(overrides)
    return {k: v for k, v in data.items() if v is not None}


@pytest_asyncio.fixture
async def other_teacher_client(storage, client_factory) -> AsyncClient:
    await storage.create_user(
        UserCreate(username='mrsmith', password=hash_password('s3cret'), name='Pat Smith', role=UserRole.TEACHER)
    )
    return await client_factory('mrsmith', 's3cret')


class TestUploadMaterial:

    @pytest.mark.asyncio
    async def test_upload_with_file(self, teacher_client: AsyncClient, upload_dir):
        response = await teacher_client.post(
            '/api/materials',
            data=form(),
            files={'file': ('notes.pdf', PDF_BYTES, 'application/pdf')},
        )

        assert response.status_code == 201
        data = response.json()
        assert data['teacherId'] == 2
        assert data['classId'] == '10A'
        assert data['uploadedAt'].endswith('Z')
        assert data['fileUrl'].startswith('/fileuploads/')
        name = data['fileUrl'].rsplit('/', 1)[1]
        assert stored_files(upload_dir) == [name]
        assert (upload_dir / name).read_bytes() == PDF_BYTES

    @pytest.mark.asyncio
    async def test_uploaded_file_is_served(self, teacher_client: AsyncClient, student_client: AsyncClient):
        created = (await teacher_client.post(
            '/api/materials', data=form(), files={'file': ('notes.pdf', PDF_BYTES, 'application/pdf')}
        )).json()

        response = await student_client.get(created['fileUrl'])

        assert response.status_code == 200
        assert response.content == PDF_BYTES

    @pytest.mark.asyncio
    async def test_link_only_material(self, teacher_client: AsyncClient, upload_dir):
        response = await teacher_client.post(
            '/api/materials', data=form(fileUrl='https://example.com/slides.pdf')
        )

        assert response.status_code == 201
        assert response.json()['fileUrl'] == 'https://example.com/slides.pdf'
        assert stored_files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_neither_file_nor_link(self, teacher_client: AsyncClient, storage):
        response = await teacher_client.post('/api/materials', data=form())

        assert response.status_code == 400
        assert [e['field'] for e in response.json()['errors']] == ['fileUrl']
        assert await storage.list_materials() == []

    @pytest.mark.asyncio
    async def test_errors_use_form_field_names(self, teacher_client: AsyncClient):
        response = await teacher_client.post(
            '/api/materials', data=form(title='x' * 300, description=None)
        )

        assert response.status_code == 400
        assert [e['field'] for e in response.json()['errors']] == ['title', 'description', 'fileUrl']

    @pytest.mark.asyncio
    async def test_link_into_upload_directory_rejected(
        self, teacher_client: AsyncClient, other_teacher_client: AsyncClient,
        student_client: AsyncClient, storage, upload_dir
    ):
        created = (await teacher_client.post(
            '/api/materials', data=form(), files={'file': ('notes.pdf', PDF_BYTES, 'application/pdf')}
        )).json()

        response = await other_teacher_client.post('/api/materials', data=form(fileUrl=created['fileUrl']))

        assert response.status_code == 400
        assert response.json()['errors'][0]['field'] == 'fileUrl'
        assert len(await storage.list_materials()) == 1
        assert len(stored_files(upload_dir)) == 1
        assert (await student_client.get(created['fileUrl'])).status_code == 200

    @pytest.mark.asyncio
    async def test_invalid_form_removes_uploaded_file(self, teacher_client: AsyncClient, storage, upload_dir):
        response = await teacher_client.post(
            '/api/materials',
            data=form(title=''),
            files={'file': ('notes.pdf', PDF_BYTES, 'application/pdf')},
        )

        assert response.status_code == 400
        assert response.json()['errors'][0]['field'] == 'title'
        assert stored_files(upload_dir) == []
        assert await storage.list_materials() == []

    @pytest.mark.asyncio
    async def test_storage_failure_removes_uploaded_file(self, teacher_client: AsyncClient, storage, upload_dir):
        storage.create_material = AsyncMock(side_effect=StorageError('database unavailable'))

        response = await teacher_client.post(
            '/api/materials', data=form(), files={'file': ('notes.pdf', PDF_BYTES, 'application/pdf')}
        )

        assert response.status_code == 500
        assert response.json()['message'] == 'database unavailable'
        assert stored_files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_disallowed_extension(self, teacher_client: AsyncClient, upload_dir):
        response = await teacher_client.post(
            '/api/materials', data=form(), files={'file': ('run.exe', b'MZ', 'application/octet-stream')}
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_FILE_TYPE'
        assert stored_files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_file_too_large(self, teacher_client: AsyncClient, upload_dir):
        response = await teacher_client.post(
            '/api/materials', data=form(), files={'file': ('big.txt', b'x' * (64 * 1024 + 1), 'text/plain')}
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'FILE_TOO_LARGE'
        assert stored_files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_student_forbidden_and_nothing_written(self, student_client: AsyncClient, upload_dir):
        response = await student_client.post(
            '/api/materials', data=form(), files={'file': ('notes.pdf', PDF_BYTES, 'application/pdf')}
        )

        assert response.status_code == 403
        assert stored_files(upload_dir) == []


class TestReadMaterials:

    @pytest.mark.asyncio
    async def test_list_by_teacher(
        self, teacher_client: AsyncClient, other_teacher_client: AsyncClient, student_client: AsyncClient
    ):
        mine = (await teacher_client.post('/api/materials', data=form(fileUrl='https://a.example/1'))).json()
        await other_teacher_client.post('/api/materials', data=form(fileUrl='https://a.example/2'))

        assert len((await student_client.get('/api/materials')).json()) == 2
        assert (await student_client.get('/api/materials/teacher/2')).json() == [mine]
        assert (await student_client.get(f"/api/materials/{mine['id']}")).json() == mine

    @pytest.mark.asyncio
    async def test_get_missing(self, student_client: AsyncClient):
        assert (await student_client.get('/api/materials/999')).status_code == 404


class TestDeleteMaterial:

    @pytest.mark.asyncio
    async def test_delete_removes_row_and_file(self, teacher_client: AsyncClient, upload_dir):
        await teacher_client.post('/api/materials', data=form(fileUrl='https://a.example/keep'))
        created = (await teacher_client.post(
            '/api/materials', data=form(), files={'file': ('notes.pdf', PDF_BYTES, 'application/pdf')}
        )).json()
        before = len((await teacher_client.get('/api/materials')).json())

        response = await teacher_client.delete(f"/api/materials/{created['id']}")

        assert response.status_code == 204
        assert len((await teacher_client.get('/api/materials')).json()) == before - 1
        assert stored_files(upload_dir) == []
        assert (await teacher_client.get(created['fileUrl'])).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_when_file_already_gone(self, teacher_client: AsyncClient, upload_dir):
        created = (await teacher_client.post(
            '/api/materials', data=form(), files={'file': ('notes.pdf', PDF_BYTES, 'application/pdf')}
        )).json()
        for path in upload_dir.iterdir():
            path.unlink()

        response = await teacher_client.delete(f"/api/materials/{created['id']}")

        assert response.status_code == 204

    @pytest.mark.asyncio
    async def test_other_teacher_forbidden(
        self, teacher_client: AsyncClient, other_teacher_client: AsyncClient, storage, upload_dir
    ):
        created = (await teacher_client.post(
            '/api/materials', data=form(), files={'file': ('notes.pdf', PDF_BYTES, 'application/pdf')}
        )).json()

        response = await other_teacher_client.delete(f"/api/materials/{created['id']}")

        assert response.status_code == 403
        assert response.json()['message'] == 'You can only delete your own materials'
        assert await storage.get_material(created['id']) is not None
        assert len(stored_files(upload_dir)) == 1

    @pytest.mark.asyncio
    async def test_admin_deletes_any(self, teacher_client: AsyncClient, admin_client: AsyncClient):
        created = (await teacher_client.post('/api/materials', data=form(fileUrl='https://a.example/x'))).json()

        assert (await admin_client.delete(f"/api/materials/{created['id']}")).status_code == 204

    @pytest.mark.asyncio
    async def test_student_forbidden(self, teacher_client: AsyncClient, student_client: AsyncClient):
        created = (await teacher_client.post('/api/materials', data=form(fileUrl='https://a.example/x'))).json()

        assert (await student_client.delete(f"/api/materials/{created['id']}")).status_code == 403

    @pytest.mark.asyncio
    async def test_delete_missing(self, teacher_client: AsyncClient):
        assert (await teacher_client.delete('/api/materials/999')).status_code == 404

    @pytest.mark.asyncio
    async def test_storage_failure_keeps_file(self, teacher_client: AsyncClient, storage, upload_dir):
        created = (await teacher_client.post(
            '/api/materials', data=form(), files={'file': ('notes.pdf', PDF_BYTES, 'application/pdf')}
        )).json()
        storage.delete_material = AsyncMock(side_effect=StorageError('database unavailable'))

        response = await teacher_client.delete(f"/api/materials/{created['id']}")

        assert response.status_code == 500
        assert await storage.get_material(created['id']) is not None
        assert len(stored_files(upload_dir)) == 1
        assert (await teacher_client.get(created['fileUrl'])).status_code == 200
