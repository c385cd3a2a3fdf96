"""
Tests for study sheet listing, creation and purchase
"""
from decimal import Decimal
from unittest.mock import patch

import pytest

from market.models import Payment, Purchase, StudySheet
from payments.promptpay import decode_promptpay_payload, verify_checksum

from .test_promptpay import PHONE_100_BAHT


class TestStudySheetList:

    def test_only_approved_sheets_are_listed(self, client, approved_sheet, pending_sheet):
        response = client.get('/api/study-sheets/')
        assert response.status_code == 200
        assert [s['id'] for s in response.json()] == [approved_sheet.id]
        assert response.json()[0]['courseCode'] == 'CS101'
        assert response.json()[0]['priceCents'] == 10000

    def test_filter_by_course_code(self, client, approved_sheet):
        assert len(client.get('/api/study-sheets/', {'courseCode': 'cs101'}).json()) == 1
        assert client.get('/api/study-sheets/', {'courseCode': 'MA200'}).json() == []

    def test_mine_lists_every_status(self, seller_client, approved_sheet, pending_sheet):
        response = seller_client.get('/api/study-sheets/mine/')
        assert {s['status'] for s in response.json()} == {'APPROVED', 'PENDING'}


class TestCreateStudySheet:

    def test_create_pending_sheet(self, seller_client, seller, course):
        response = seller_client.post('/api/study-sheets/', {
            'title': 'Lab notes',
            'description': 'Week 1-5',
            'file_url': 'https://files.example.com/lab.pdf',
            'price_cents': 2500,
            'course_code': 'cs101',
        })
        assert response.status_code == 201
        sheet = StudySheet.objects.get(id=response.json()['id'])
        assert sheet.owner == seller
        assert sheet.status == 'PENDING'
        assert sheet.course == course

    def test_unknown_course(self, seller_client, course):
        response = seller_client.post('/api/study-sheets/', {
            'title': 'Lab notes',
            'file_url': 'https://files.example.com/lab.pdf',
            'price_cents': 2500,
            'course_code': 'XX999',
        })
        assert response.status_code == 400
        assert 'course_code' in response.json()['message']

    def test_price_must_be_positive(self, seller_client, course):
        response = seller_client.post('/api/study-sheets/', {
            'title': 'Free notes',
            'file_url': 'https://files.example.com/free.pdf',
            'price_cents': 0,
            'course_code': 'CS101',
        })
        assert response.status_code == 400

    def test_anonymous_is_redirected(self, client, course):
        response = client.post('/api/study-sheets/', {'title': 'x'})
        assert response.status_code == 302


class TestPurchase:

    def test_purchase_creates_payment_with_promptpay_payload(self, buyer_client, buyer, approved_sheet):
        response = buyer_client.post(f'/api/study-sheets/{approved_sheet.id}/purchase/')
        assert response.status_code == 201

        data = response.json()
        assert set(data) == {'id', 'reference_code', 'amount', 'promptpay_payload'}
        assert data['amount'] == 10000
        assert data['reference_code'].startswith('PAY-')
        # PROMPTPAY_ID 0812345678 + 100.00 บาท
        assert data['promptpay_payload'] == PHONE_100_BAHT

        payment = Payment.objects.get(id=data['id'])
        assert payment.status == 'PENDING'
        assert payment.buyer == buyer
        assert payment.purchase.amount_cents == 10000

    def test_payload_uses_sheet_price(self, buyer_client, approved_sheet):
        approved_sheet.price_cents = 4950
        approved_sheet.save()
        payload = buyer_client.post(f'/api/study-sheets/{approved_sheet.id}/purchase/').json()['promptpay_payload']
        assert verify_checksum(payload)
        decoded = decode_promptpay_payload(payload)
        assert decoded['amount'] == Decimal('49.50')
        assert decoded['proxy_id'] == '0066812345678'

    def test_repeat_purchase_returns_same_payment(self, buyer_client, approved_sheet):
        first = buyer_client.post(f'/api/study-sheets/{approved_sheet.id}/purchase/')
        second = buyer_client.post(f'/api/study-sheets/{approved_sheet.id}/purchase/')
        assert second.status_code == 200
        assert second.json() == first.json()
        assert Payment.objects.count() == 1

    def test_concurrent_duplicate_purchase_returns_existing_payment(self, buyer_client, approved_sheet, make_payment):
        # อีก request สร้าง Purchase ไปแล้วหลังจากเช็กซื้อซ้ำผ่าน
        payment = make_payment(approved_sheet)
        with patch('market.views._existing_payment', side_effect=[None, payment]):
            response = buyer_client.post(f'/api/study-sheets/{approved_sheet.id}/purchase/')

        assert response.status_code == 200
        assert response.json()['reference_code'] == payment.reference_code
        assert Purchase.objects.count() == 1
        assert Payment.objects.count() == 1

    def test_cannot_buy_own_sheet(self, seller_client, approved_sheet):
        response = seller_client.post(f'/api/study-sheets/{approved_sheet.id}/purchase/')
        assert response.status_code == 400
        assert Purchase.objects.count() == 0

    def test_pending_sheet_cannot_be_bought(self, buyer_client, pending_sheet):
        response = buyer_client.post(f'/api/study-sheets/{pending_sheet.id}/purchase/')
        assert response.status_code == 404

    def test_get_not_allowed(self, buyer_client, approved_sheet):
        response = buyer_client.get(f'/api/study-sheets/{approved_sheet.id}/purchase/')
        assert response.status_code == 405

    def test_misconfigured_promptpay_id(self, settings, buyer_client, approved_sheet):
        settings.PROMPTPAY_ID = ''
        response = buyer_client.post(f'/api/study-sheets/{approved_sheet.id}/purchase/')
        assert response.status_code == 503
        assert Purchase.objects.count() == 0
        assert Payment.objects.count() == 0

    def test_purchased_list(self, buyer_client, approved_sheet):
        buyer_client.post(f'/api/study-sheets/{approved_sheet.id}/purchase/')
        response = buyer_client.get('/api/study-sheets/purchased/')
        assert response.status_code == 200
        purchases = response.json()
        assert len(purchases) == 1
        assert purchases[0]['amountCents'] == 10000
        assert purchases[0]['studySheet']['id'] == approved_sheet.id
