"""
Unit Tests for Auth API Endpoints
Tests for: /api/auth/register, /login, /refresh, /number-plates, /me, /logout
"""
import pytest
from httpx import AsyncClient

from soho_transport.core.security import build_token_claims, create_refresh_token, decode_access_token

from conftest import DRIVER_PLATE, TEST_PASSWORD


class TestRegisterEndpoint:
    """Test POST /api/auth/register"""

    @pytest.mark.asyncio
    async def test_register_parent(self, client: AsyncClient, sample_registration):
        body = sample_registration(email="Parent.One@Example.com")
        response = await client.post('/api/auth/register', json=body)

        assert response.status_code == 201
        assert response.json() == {
            'success': True,
            'message': 'Registration successful.',
            'data': {'email': 'parent.one@example.com', 'role': 'Parent'},
        }

    @pytest.mark.asyncio
    async def test_register_driver(self, client: AsyncClient, sample_registration, active_plate):
        response = await client.post('/api/auth/register', json=sample_registration(
            role='Driver', numberPlate=DRIVER_PLATE
        ))

        assert response.status_code == 201
        assert response.json()['data']['role'] == 'Driver'

    @pytest.mark.asyncio
    async def test_register_driver_without_plate(self, client: AsyncClient, sample_registration):
        response = await client.post('/api/auth/register', json=sample_registration(role='Driver'))

        assert response.status_code == 400
        data = response.json()
        assert data['success'] is False
        assert data['message'] == 'Validation failed.'
        assert data['errors'] == [{
            'field': 'numberPlate',
            'message': 'numberPlate is required for Driver and Bus Assistant.',
        }]

    @pytest.mark.asyncio
    async def test_register_unknown_plate(self, client: AsyncClient, sample_registration, active_plate):
        response = await client.post('/api/auth/register', json=sample_registration(
            role='Bus Assistant', numberPlate='KZZ 999Z'
        ))

        assert response.status_code == 400
        assert response.json() == {
            'success': False,
            'message': 'Selected number plate is not available. Choose an existing number plate.',
            'code': 'NUMBER_PLATE_NOT_FOUND',
        }

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, sample_registration, parent_user):
        response = await client.post('/api/auth/register', json=sample_registration(email=parent_user.email))

        assert response.status_code == 409
        assert response.json()['code'] == 'DUPLICATE_USER'

    @pytest.mark.asyncio
    async def test_register_school_admin_rejected(self, client: AsyncClient, sample_registration):
        response = await client.post('/api/auth/register', json=sample_registration(role='School Admin'))

        assert response.status_code == 400
        assert response.json()['errors'] == [{'field': 'role', 'message': 'Invalid role selected.'}]

    @pytest.mark.asyncio
    async def test_register_missing_fields(self, client: AsyncClient):
        response = await client.post('/api/auth/register', json={'email': 'a@example.com'})

        assert response.status_code == 400
        errors = {e['field']: e['message'] for e in response.json()['errors']}
        assert errors['firstName'] == 'firstName is required.'
        assert errors['password'] == 'password is required.'

    @pytest.mark.asyncio
    async def test_register_invalid_email(self, client: AsyncClient, sample_registration):
        response = await client.post('/api/auth/register', json=sample_registration(email='nope'))

        assert response.status_code == 400
        assert response.json()['errors'][0] == {'field': 'email', 'message': 'Invalid email format.'}

    @pytest.mark.asyncio
    @pytest.mark.parametrize('method', ['GET', 'PUT', 'PATCH', 'DELETE'])
    async def test_register_wrong_method(self, client: AsyncClient, method):
        response = await client.request(method, '/api/auth/register')

        assert response.status_code == 405
        assert response.json() == {
            'success': False,
            'message': 'Method not allowed. Use POST /api/auth/register.',
        }


class TestLoginEndpoint:
    """Test POST /api/auth/login"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, driver_user):
        response = await client.post('/api/auth/login', json={
            'email': driver_user.email.upper(),
            'password': TEST_PASSWORD,
        })

        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        assert body['message'] == 'Login successful.'

        data = body['data']
        assert data['id'] == driver_user.id
        assert data['email'] == driver_user.email
        assert data['role'] == 'Driver'
        assert data['numberPlate'] == DRIVER_PLATE
        assert data['token'] == data['accessToken']
        assert decode_access_token(data['accessToken'])['sub'] == str(driver_user.id)
        assert data['refreshToken']

    @pytest.mark.asyncio
    async def test_login_sets_refresh_cookie(self, client: AsyncClient, driver_user):
        response = await client.post('/api/auth/login', json={
            'email': driver_user.email,
            'password': TEST_PASSWORD,
        })

        cookie = response.headers['set-cookie']
        assert f"refreshToken={response.json()['data']['refreshToken']}" in cookie
        assert 'HttpOnly' in cookie
        assert 'Path=/api/auth' in cookie

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, driver_user):
        response = await client.post('/api/auth/login', json={
            'email': driver_user.email,
            'password': 'wrong-password',
        })

        assert response.status_code == 401
        assert response.json() == {'success': False, 'message': 'Invalid login credentials.'}

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, client: AsyncClient):
        response = await client.post('/api/auth/login', json={
            'email': 'nobody@example.com',
            'password': TEST_PASSWORD,
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_wrong_method(self, client: AsyncClient):
        response = await client.get('/api/auth/login')

        assert response.status_code == 405
        assert response.json()['message'] == 'Method not allowed. Use POST /api/auth/login.'


class TestRefreshEndpoint:
    """Test POST /api/auth/refresh"""

    @pytest.mark.asyncio
    async def test_refresh_from_body(self, client: AsyncClient, parent_user):
        token = create_refresh_token(build_token_claims(parent_user.id, parent_user.email, 'Parent'))

        response = await client.post('/api/auth/refresh', json={'refreshToken': token})

        assert response.status_code == 200
        data = response.json()['data']
        assert data['email'] == parent_user.email
        assert decode_access_token(data['accessToken'])['role'] == 'Parent'
        assert 'refreshToken=' in response.headers['set-cookie']

    @pytest.mark.asyncio
    async def test_refresh_from_cookie(self, client: AsyncClient, parent_user):
        token = create_refresh_token(build_token_claims(parent_user.id, parent_user.email, 'Parent'))

        response = await client.post('/api/auth/refresh', headers={'Cookie': f'refreshToken={token}'})

        assert response.status_code == 200
        assert response.json()['message'] == 'Token refreshed successfully.'

    @pytest.mark.asyncio
    async def test_refresh_missing_token(self, client: AsyncClient):
        response = await client.post('/api/auth/refresh')

        assert response.status_code == 401
        assert response.json()['message'] == 'Refresh token is missing.'

    @pytest.mark.asyncio
    async def test_refresh_invalid_token(self, client: AsyncClient):
        response = await client.post('/api/auth/refresh', json={'refreshToken': 'not.a.token'})

        assert response.status_code == 401
        assert response.json()['message'] == 'Invalid or expired refresh token.'

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, client: AsyncClient, parent_headers):
        access_token = parent_headers['Authorization'].split(' ', 1)[1]

        response = await client.post('/api/auth/refresh', json={'refreshToken': access_token})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh_wrong_method(self, client: AsyncClient):
        response = await client.delete('/api/auth/refresh')

        assert response.status_code == 405
        assert response.json()['message'] == 'Method not allowed. Use POST /api/auth/refresh.'


class TestNumberPlatesEndpoint:
    """Test GET /api/auth/number-plates"""

    @pytest.mark.asyncio
    async def test_lists_active_plates_without_auth(self, client: AsyncClient, active_plate):
        response = await client.get('/api/auth/number-plates')

        assert response.status_code == 200
        assert response.json()['data'] == {'numberPlates': [DRIVER_PLATE]}


class TestSessionEndpoints:
    """Test GET /api/auth/me and POST /api/auth/logout"""

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, driver_user, driver_headers):
        response = await client.get('/api/auth/me', headers=driver_headers)

        assert response.status_code == 200
        assert response.json()['data'] == {
            'sub': str(driver_user.id),
            'email': driver_user.email,
            'role': 'Driver',
        }

    @pytest.mark.asyncio
    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get('/api/auth/me')

        assert response.status_code == 401
        assert response.json()['message'] == 'Access token is missing.'
        assert response.headers['www-authenticate'] == 'Bearer'

    @pytest.mark.asyncio
    async def test_me_with_invalid_token(self, client: AsyncClient):
        response = await client.get('/api/auth/me', headers={'Authorization': 'Bearer garbage'})

        assert response.status_code == 401
        assert response.json()['message'] == 'Invalid or expired access token.'

    @pytest.mark.asyncio
    async def test_logout_clears_cookie(self, client: AsyncClient):
        response = await client.post('/api/auth/logout')

        assert response.status_code == 200
        cookie = response.headers['set-cookie']
        assert cookie.startswith('refreshToken=')
        assert 'Max-Age=0' in cookie
