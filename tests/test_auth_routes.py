"""Tests for the ``/api/auth`` routes."""

from datetime import datetime, timedelta

from pytz import UTC

from advocate.auth import tokens

from .helpers import AppTestCase, SECRET


class TestRegister(AppTestCase):
    """Registration creates a profile and logs it in."""

    def test_register(self):
        response = self.client.post('/api/auth/register', json={
            'profileName': 'alice', 'email': 'alice@lawfirm.com',
            'password': 'secret1'})
        self.assertEqual(response.status_code, 201)
        data = response.get_json()
        self.assertEqual(data['message'], 'Profile created successfully')
        self.assertEqual(data['user']['profileName'], 'alice')
        self.assertNotIn('password', data['user'])
        claims = tokens.decode(data['token'], SECRET)
        self.assertEqual(claims['user_id'], data['user']['id'])

    def test_register_without_email_or_password(self):
        response = self.client.post('/api/auth/register',
                                    json={'profileName': 'anon'})
        self.assertEqual(response.status_code, 201)
        self.assertIsNone(response.get_json()['user']['email'])

    def test_profile_exists(self):
        self.make_user('alice')
        response = self.client.post('/api/auth/register',
                                    json={'profileName': 'alice'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'PROFILE_EXISTS')

    def test_email_exists(self):
        self.make_user('alice', email='alice@lawfirm.com')
        response = self.client.post('/api/auth/register', json={
            'profileName': 'bob', 'email': 'alice@lawfirm.com'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'EMAIL_EXISTS')

    def test_invalid_input(self):
        response = self.client.post('/api/auth/register', json={
            'profileName': 'a', 'email': 'not-an-email', 'password': '123'})
        self.assertEqual(response.status_code, 400)
        data = response.get_json()
        self.assertEqual(data['code'], 'VALIDATION_FAILED')
        fields = {error['field'] for error in data['errors']}
        self.assertEqual(fields, {'profileName', 'email', 'password'})


class TestLogin(AppTestCase):

    def setUp(self):
        super(TestLogin, self).setUp()
        self.user = self.make_user('alice', email='alice@lawfirm.com',
                                   password='secret1')

    def test_login(self):
        response = self.client.post('/api/auth/login', json={
            'profileName': 'alice', 'password': 'secret1'})
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['user']['id'], self.user.user_id)
        self.assertTrue(data['token'])

    def test_login_by_email(self):
        response = self.client.post('/api/auth/login', json={
            'email': 'alice@lawfirm.com', 'password': 'secret1'})
        self.assertEqual(response.status_code, 200)

    def test_no_credentials(self):
        response = self.client.post('/api/auth/login',
                                    json={'password': 'secret1'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'CREDENTIALS_REQUIRED')

    def test_wrong_password(self):
        response = self.client.post('/api/auth/login', json={
            'profileName': 'alice', 'password': 'wrong'})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json(), {
            'message': 'Invalid credentials', 'code': 'INVALID_CREDENTIALS'})

    def test_unknown_profile(self):
        response = self.client.post('/api/auth/login',
                                    json={'profileName': 'mallory'})
        self.assertEqual(response.status_code, 401)


class TestProfile(AppTestCase):
    """The current user's own profile."""

    def setUp(self):
        super(TestProfile, self).setUp()
        self.user = self.make_user('alice', password='secret1')
        self.headers = self.headers_for(self.user)

    def test_token_required(self):
        response = self.client.get('/api/auth/profile')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json(), {
            'message': 'Access token required', 'code': 'TOKEN_REQUIRED'})

    def test_expired_token(self):
        issued = datetime.now(tz=UTC) - timedelta(days=30)
        token = tokens.encode(self.user.user_id, SECRET, 3600, now=issued)
        response = self.client.get(
            '/api/auth/profile', headers={'Authorization': f'Bearer {token}'})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()['code'], 'TOKEN_EXPIRED')

    def test_get_profile(self):
        response = self.client.get('/api/auth/profile', headers=self.headers)
        self.assertEqual(response.status_code, 200)
        user = response.get_json()['user']
        self.assertEqual(user['profileName'], 'alice')
        self.assertEqual(user['subscription']['plan'], 'free')

    def test_verify(self):
        response = self.client.get('/api/auth/verify', headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.get_json()['valid'])

    def test_update_profile(self):
        response = self.client.put('/api/auth/profile', headers=self.headers,
                                   json={'profileName': 'alicia',
                                         'preferences': {'theme': 'light'}})
        self.assertEqual(response.status_code, 200)
        user = response.get_json()['user']
        self.assertEqual(user['profileName'], 'alicia')
        self.assertEqual(user['preferences']['theme'], 'light')

    def test_update_profile_bad_theme(self):
        response = self.client.put('/api/auth/profile', headers=self.headers,
                                   json={'preferences': {'theme': 'pink'}})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['errors'][0]['field'],
                         'preferences.theme')

    def test_change_password(self):
        response = self.client.put('/api/auth/password', headers=self.headers,
                                   json={'currentPassword': 'secret1',
                                         'newPassword': 'secret2'})
        self.assertEqual(response.status_code, 200)
        response = self.client.post('/api/auth/login', json={
            'profileName': 'alice', 'password': 'secret2'})
        self.assertEqual(response.status_code, 200)

    def test_change_password_wrong_current(self):
        response = self.client.put('/api/auth/password', headers=self.headers,
                                   json={'currentPassword': 'nope',
                                         'newPassword': 'secret2'})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()['code'], 'INVALID_PASSWORD')

    def test_change_password_without_one(self):
        anon = self.make_user('anon')
        response = self.client.put('/api/auth/password',
                                   headers=self.headers_for(anon),
                                   json={'currentPassword': 'x',
                                         'newPassword': 'secret2'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['code'], 'NO_PASSWORD')

    def test_logout(self):
        response = self.client.post('/api/auth/logout', headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['message'], 'Logout successful')
