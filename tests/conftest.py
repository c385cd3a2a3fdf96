"""
Pytest configuration and fixtures
"""
import pytest
from django.contrib.auth.models import User
from django.test import Client

from market.models import Course, Profile, StudySheet

PLATFORM_PROMPTPAY_ID = '0812345678'


@pytest.fixture(autouse=True)
def marketplace_settings(settings):
    """Known PromptPay account, no LINE channel and a fast password hasher"""
    settings.PROMPTPAY_ID = PLATFORM_PROMPTPAY_ID
    settings.LINE_CHANNEL_ACCESS_TOKEN = ''
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    return settings


def _make_user(username, **extra):
    profile_fields = {
        'phone': extra.pop('phone', ''),
        'promptpay_id': extra.pop('promptpay_id', ''),
        'line_id': extra.pop('line_id', ''),
    }
    user = User.objects.create_user(
        username=username,
        email=f'{username}@example.com',
        password='s3cret-pass',
        **extra
    )
    Profile.objects.create(user=user, **profile_fields)
    return user


@pytest.fixture
def buyer(db):
    return _make_user('buyer', first_name='Nok', line_id='U-buyer')


@pytest.fixture
def seller(db):
    return _make_user('seller', promptpay_id='0898765432', line_id='U-seller')


@pytest.fixture
def staff(db):
    return _make_user('staff', is_staff=True)


def _client_for(user):
    client = Client()
    client.force_login(user)
    return client


@pytest.fixture
def buyer_client(buyer):
    return _client_for(buyer)


@pytest.fixture
def seller_client(seller):
    return _client_for(seller)


@pytest.fixture
def staff_client(staff):
    return _client_for(staff)


@pytest.fixture
def course(db):
    return Course.objects.create(code='CS101', name='Intro to Programming')


@pytest.fixture
def approved_sheet(seller, course):
    # 100.00 บาท
    return StudySheet.objects.create(
        owner=seller,
        course=course,
        title='Midterm summary',
        file_url='https://files.example.com/cs101-midterm.pdf',
        price_cents=10000,
        status='APPROVED',
    )


@pytest.fixture
def pending_sheet(seller, course):
    return StudySheet.objects.create(
        owner=seller,
        course=course,
        title='Final summary',
        file_url='https://files.example.com/cs101-final.pdf',
        price_cents=5000,
    )


@pytest.fixture
def make_payment(buyer):
    """Purchase + Payment without going through the purchase view"""
    from market.models import Payment, Purchase
    from market.utils import generate_reference_code

    def _make(sheet, status='PENDING', seller_amount=None, purchaser=None):
        purchase = Purchase.objects.create(
            buyer=purchaser or buyer,
            study_sheet=sheet,
            amount_cents=sheet.price_cents,
        )
        return Payment.objects.create(
            purchase=purchase,
            reference_code=generate_reference_code(),
            amount=sheet.price_cents,
            status=status,
            seller_amount=seller_amount,
        )
    return _make
