"""
Tests for register / login / profile
"""
import pytest
from django.contrib.auth.models import User

from market.utils import get_profile


@pytest.mark.django_db
class TestRegister:

    def _form(self, **overrides):
        data = {
            'username': '0811111111',
            'first_name': 'Ploy',
            'last_name': 'Srisuk',
            'email': 'ploy@example.com',
            'password1': 'very-long-pass-99',
            'password2': 'very-long-pass-99',
        }
        data.update(overrides)
        return data

    def test_register_creates_profile(self, client):
        response = client.post('/api/auth/register/', self._form(promptpay_id='081-111-1111', phone='0811111111'))
        assert response.status_code == 201
        assert response.json()['role'] == 'STUDENT'

        profile = get_profile(User.objects.get(username='0811111111'))
        assert profile.promptpay_id == '0811111111'
        assert profile.phone == '0811111111'

    def test_invalid_promptpay_id(self, client):
        response = client.post('/api/auth/register/', self._form(promptpay_id='abc'))
        assert response.status_code == 400
        assert not User.objects.filter(username='0811111111').exists()

    def test_password_mismatch(self, client):
        response = client.post('/api/auth/register/', self._form(password2='something-else-1'))
        assert response.status_code == 400


class TestLogin:

    def test_login_and_logout(self, client, buyer):
        response = client.post('/api/auth/login/', {'username': 'buyer', 'password': 's3cret-pass'})
        assert response.status_code == 200
        assert response.json()['username'] == 'buyer'
        assert client.get('/api/me/').status_code == 200

        client.post('/api/auth/logout/')
        assert client.get('/api/me/').status_code == 302

    def test_wrong_password(self, client, buyer):
        response = client.post('/api/auth/login/', {'username': 'buyer', 'password': 'nope'})
        assert response.status_code == 401


class TestProfile:

    def test_me(self, staff_client):
        data = staff_client.get('/api/me/').json()
        assert data['role'] == 'ADMIN'
        assert data['lineLinked'] is False

    def test_update_promptpay_id(self, buyer_client, buyer):
        response = buyer_client.post('/api/me/', {'promptpay_id': '1234567890123'})
        assert response.status_code == 200
        assert response.json()['promptpayId'] == '1234567890123'
        # ช่องที่ไม่ได้ส่งมาต้องไม่หาย
        assert response.json()['firstName'] == 'Nok'
        assert response.json()['lineLinked'] is True

    def test_reject_bad_promptpay_id(self, buyer_client, buyer):
        response = buyer_client.post('/api/me/', {'promptpay_id': '12345'})
        assert response.status_code == 400
        assert get_profile(buyer).promptpay_id == ''
