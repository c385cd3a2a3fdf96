"""
Tests for buyer payment view, wallet and seller withdrawals
"""
from unittest.mock import patch

from django.contrib.auth.models import User

from market.models import Withdrawal
from market.utils import get_profile


class TestPaymentDetail:

    def test_buyer_sees_payload_and_qr(self, buyer_client, approved_sheet):
        created = buyer_client.post(f'/api/study-sheets/{approved_sheet.id}/purchase/').json()

        response = buyer_client.get(f"/api/payments/{created['id']}/")
        assert response.status_code == 200
        data = response.json()
        assert data['referenceCode'] == created['reference_code']
        assert data['promptpayPayload'] == created['promptpay_payload']
        assert data['status'] == 'PENDING'
        assert data['qrImage'].startswith('data:image/png;base64,')

    def test_no_qr_after_confirmation(self, buyer_client, approved_sheet, make_payment):
        payment = make_payment(approved_sheet, status='APPROVED', seller_amount=8500)
        response = buyer_client.get(f'/api/payments/{payment.id}/')
        assert response.json()['qrImage'] is None

    def test_other_users_cannot_see_payment(self, seller_client, approved_sheet, make_payment):
        payment = make_payment(approved_sheet)
        response = seller_client.get(f'/api/payments/{payment.id}/')
        assert response.status_code == 403

    def test_missing_payment(self, buyer_client):
        assert buyer_client.get('/api/payments/999/').status_code == 404


class TestWallet:

    def test_wallet_summary(self, seller_client, approved_sheet, make_payment):
        make_payment(approved_sheet, status='RELEASED', seller_amount=8500)
        response = seller_client.get('/api/me/wallet/')
        assert response.status_code == 200
        assert response.json() == {'walletBalance': 8500, 'totalEarned': 8500, 'pendingPayout': 0}

    def test_anonymous_is_redirected(self, client):
        assert client.get('/api/me/wallet/').status_code == 302


class TestWithdrawals:

    def test_create_withdrawal(self, seller_client, seller, approved_sheet, make_payment):
        make_payment(approved_sheet, status='RELEASED', seller_amount=8500)

        response = seller_client.post('/api/withdrawals/', {'amount_cents': 5000})
        assert response.status_code == 201
        assert response.json()['status'] == 'PENDING'
        assert response.json()['amount'] == 5000
        assert seller_client.get('/api/me/wallet/').json()['walletBalance'] == 3500

    def test_cannot_withdraw_more_than_balance(self, seller_client, approved_sheet, make_payment):
        make_payment(approved_sheet, status='RELEASED', seller_amount=8500)
        response = seller_client.post('/api/withdrawals/', {'amount_cents': 8501})
        assert response.status_code == 400
        assert Withdrawal.objects.count() == 0

    def test_amount_must_be_positive(self, seller_client):
        response = seller_client.post('/api/withdrawals/', {'amount_cents': 0})
        assert response.status_code == 400

    def test_promptpay_id_required(self, seller_client, seller, approved_sheet, make_payment):
        make_payment(approved_sheet, status='RELEASED', seller_amount=8500)
        profile = get_profile(seller)
        profile.promptpay_id = ''
        profile.save()

        response = seller_client.post('/api/withdrawals/', {'amount_cents': 100})
        assert response.status_code == 400
        assert 'PromptPay' in response.json()['message']

    def test_my_withdrawals(self, seller_client, seller, buyer):
        Withdrawal.objects.create(seller=seller, amount=100)
        Withdrawal.objects.create(seller=buyer, amount=200)
        response = seller_client.get('/api/withdrawals/mine/')
        assert [w['amount'] for w in response.json()] == [100]

    def test_seller_row_is_locked_before_balance_check(self, seller_client, seller, approved_sheet, make_payment):
        make_payment(approved_sheet, status='RELEASED', seller_amount=8500)
        with patch.object(User.objects, 'select_for_update', wraps=User.objects.select_for_update) as lock:
            response = seller_client.post('/api/withdrawals/', {'amount_cents': 8500})
        assert response.status_code == 201
        lock.assert_called_once_with()

        # ถอนหมดแล้ว ครั้งถัดไปต้องไม่ผ่าน
        response = seller_client.post('/api/withdrawals/', {'amount_cents': 1})
        assert response.status_code == 400
        assert Withdrawal.objects.count() == 1
