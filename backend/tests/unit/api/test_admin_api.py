"""
API Tests for admin, AI and health endpoints
"""
import pytest
from httpx import AsyncClient


class TestAdminUsers:

    @pytest.mark.asyncio
    async def test_list_and_delete(self, client: AsyncClient, student, admin_headers):
        response = await client.get('/api/v1/admin/users', params={'role': 'student'}, headers=admin_headers)
        assert [u['id'] for u in response.json()] == [student.id]

        response = await client.delete(f'/api/v1/admin/users/{student.id}', headers=admin_headers)
        assert response.status_code == 204
        response = await client.delete(f'/api/v1/admin/users/{student.id}', headers=admin_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_bulk_create(self, client: AsyncClient, admin_headers):
        response = await client.post('/api/v1/admin/users/bulk', json={'users': [
            {'firstName': 'Ada', 'surname': 'Obi', 'email': 'ada@example.com', 'role': 'student'},
            {'firstName': 'Ada', 'surname': 'Obi', 'email': 'ada@example.com', 'role': 'student'},
        ]}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()['success_count'] == 1
        assert response.json()['errors'][0]['error'] == 'Duplicate email in CSV file: ada@example.com'

    @pytest.mark.asyncio
    async def test_non_admin_refused(self, client: AsyncClient, supervisor_headers):
        response = await client.get('/api/v1/admin/users', headers=supervisor_headers)
        assert response.status_code == 403


class TestAdminContent:

    @pytest.mark.asyncio
    async def test_announcements_visible_when_active(self, client: AsyncClient, admin_headers, student_headers):
        response = await client.post(
            '/api/v1/admin/announcements', json={'title': 'Orientation', 'content': 'Monday'}, headers=admin_headers
        )
        assert response.status_code == 201
        announcement_id = response.json()['id']

        await client.post(f'/api/v1/admin/announcements/{announcement_id}/toggle', headers=admin_headers)

        assert (await client.get('/api/v1/admin/announcements', headers=student_headers)).json() == []
        assert len((await client.get('/api/v1/admin/announcements', headers=admin_headers)).json()) == 1

    @pytest.mark.asyncio
    async def test_program_cycles(self, client: AsyncClient, admin_headers):
        response = await client.post('/api/v1/admin/program-cycles', json={
            'name': '2025 SIWES', 'start_date': '2025-01-06', 'end_date': '2025-06-27'
        }, headers=admin_headers)
        assert response.status_code == 201

        response = await client.post('/api/v1/admin/program-cycles', json={
            'name': 'Backwards', 'start_date': '2025-06-27', 'end_date': '2025-01-06'
        }, headers=admin_headers)
        assert response.status_code == 422

        assert len((await client.get('/api/v1/admin/program-cycles', headers=admin_headers)).json()) == 1

    @pytest.mark.asyncio
    async def test_branding(self, client: AsyncClient, admin_headers, student_headers):
        assert (await client.get('/api/v1/admin/branding', headers=student_headers)).json()['theme'] == 'default'

        await client.put('/api/v1/admin/branding', json={'theme': 'teal'}, headers=admin_headers)
        assert (await client.get('/api/v1/admin/branding', headers=student_headers)).json()['theme'] == 'teal'

    @pytest.mark.asyncio
    async def test_events_feed(self, client: AsyncClient, admin_headers, student_headers):
        await client.post('/api/v1/logs', json={'week': 1, 'title': 'T', 'content': 'C'}, headers=student_headers)
        response = await client.get('/api/v1/admin/events', headers=admin_headers)
        assert response.json()[0]['type'] == 'log_submitted'


class TestAiEndpoints:

    @pytest.mark.asyncio
    async def test_analyze(self, client: AsyncClient, supervisor_headers):
        response = await client.post('/api/v1/ai/analyze-log', json={'content': 'Built an API'}, headers=supervisor_headers)
        assert response.json()['analysis']['quality_score'] == 'Good'

    @pytest.mark.asyncio
    async def test_analyze_unavailable(self, client: AsyncClient, supervisor_headers, ai_client):
        ai_client.fail = True
        response = await client.post('/api/v1/ai/analyze-log', json={'content': 'Built an API'}, headers=supervisor_headers)
        assert response.status_code == 200
        assert response.json()['analysis'] is None

    @pytest.mark.asyncio
    async def test_generate_log(self, client: AsyncClient, student_headers):
        response = await client.post('/api/v1/ai/generate-log', json={
            'week': 3, 'title': 'Deployment', 'notes': 'set up CI'
        }, headers=student_headers)
        assert response.json()['content'].startswith('## Week 3')

    @pytest.mark.asyncio
    async def test_final_summary_needs_approved_logs(self, client: AsyncClient, student_headers):
        response = await client.post('/api/v1/ai/final-summary', headers=student_headers)
        assert response.status_code == 400


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get('/health')
        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

        response = await client.get('/api/v1/health')
        assert response.json()['database'] == 'ok'
        assert response.json()['background_tasks'] >= 0
