"""
Test suite for Core module
Tests: JWT login/refresh, current operator, audit trail
"""
from unittest import mock
from django.test import TestCase, RequestFactory
from rest_framework import status
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import create_audit_log, get_client_ip


class AuthTests(TestCase):
    """Test login, refresh and the current operator endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='counter1')
        self.client = AuthenticatedAPIClient()

    def test_login_returns_token_pair(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'counter1', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'counter1', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_issues_new_access_token(self):
        login = self.client.post('/api/v1/auth/login/', {'username': 'counter1', 'password': 'testpass123'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_with_garbage_token(self):
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_returns_operator(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'counter1')


class AuditLogTests(TestCase):
    """Test audit log helper and endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other_user = TestDataFactory.create_user()
        self.staff = TestDataFactory.create_user(is_staff=True)
        self.client = AuthenticatedAPIClient()

    def test_create_audit_log_records_user_and_ip(self):
        request = RequestFactory().post('/', REMOTE_ADDR='10.0.0.5')
        request.user = self.user
        log = create_audit_log(request=request, action='create', model_name='Medicine', object_id=7, object_name='Paracetamol')
        self.assertIsNotNone(log)
        self.assertEqual(log.user, self.user)
        self.assertEqual(log.ip_address, '10.0.0.5')
        self.assertEqual(log.object_id, '7')

    def test_create_audit_log_skips_missing_fields(self):
        self.assertIsNone(create_audit_log(user=self.user, action='create', model_name='Medicine'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_create_audit_log_never_raises(self):
        with mock.patch('backend.core.utils.AuditLog.objects.create', side_effect=RuntimeError('db down')):
            self.assertIsNone(create_audit_log(user=self.user, action='create', model_name='Medicine', object_id=1))

    def test_get_client_ip_prefers_forwarded_for(self):
        request = RequestFactory().get('/', HTTP_X_FORWARDED_FOR='203.0.113.9, 10.0.0.1', REMOTE_ADDR='10.0.0.1')
        self.assertEqual(get_client_ip(request), '203.0.113.9')

    def test_operator_sees_only_own_entries(self):
        create_audit_log(user=self.user, action='create', model_name='Medicine', object_id=1)
        create_audit_log(user=self.other_user, action='create', model_name='Medicine', object_id=2)
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry['object_id'] for entry in response.data], ['1'])

    def test_staff_sees_all_and_can_filter_by_action(self):
        create_audit_log(user=self.user, action='create', model_name='Medicine', object_id=1)
        create_audit_log(user=self.other_user, action='bill_paid', model_name='Bill', object_id=2)
        self.client.authenticate_user(self.staff)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/audit-logs/?action=bill_paid')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['model_name'], 'Bill')

    def test_detail_of_someone_elses_entry_is_forbidden(self):
        log = create_audit_log(user=self.other_user, action='create', model_name='Medicine', object_id=2)
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/v1/audit-logs/{log.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
