# market/utils.py
import random
import string
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.db.models import Sum
from django.http import JsonResponse
from django.utils import timezone

from .models import Payment, PlatformSetting, Profile, Withdrawal

DEFAULT_COMMISSION_RATE = Decimal('0.15')


# --- เงิน: เก็บใน DB เป็นสตางค์ (int) เสมอ ---

def to_cents(baht):
    if isinstance(baht, str) and baht.strip() == '':
        return 0
    try:
        value = Decimal(str(baht))
    except (InvalidOperation, ValueError):
        return 0
    if not value.is_finite():
        return 0
    return int((value * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def from_cents(cents):
    return (Decimal(int(cents)) / 100).quantize(Decimal('0.01'))


def format_baht_from_cents(cents):
    return '{:.2f}'.format(from_cents(cents))


def get_commission_rate():
    setting = PlatformSetting.objects.first()
    if setting:
        return Decimal(setting.commission_rate)
    return DEFAULT_COMMISSION_RATE # ยังไม่ได้ตั้งค่าใน Admin


def seller_share_cents(amount_cents, commission_rate):
    commission = (Decimal(amount_cents) * Decimal(commission_rate)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    return max(int(amount_cents - commission), 0)


def generate_reference_code():
    """เลขอ้างอิงการชำระเงิน เช่น PAY-20261017-7K2QXA"""
    prefix = 'PAY-' + timezone.localdate().strftime('%Y%m%d') + '-'
    while True:
        code = prefix + ''.join(random.choices(string.ascii_uppercase + string.digits, k=6))
        if not Payment.objects.filter(reference_code=code).exists():
            return code


def get_profile(user):
    profile, _ = Profile.objects.get_or_create(user=user)
    return profile


def build_wallet_summary(user):
    sales = Payment.objects.filter(purchase__study_sheet__owner=user)

    total_earned = sales.filter(status='RELEASED').aggregate(Sum('seller_amount'))['seller_amount__sum'] or 0
    pending_payout = sales.filter(status='APPROVED').aggregate(Sum('seller_amount'))['seller_amount__sum'] or 0
    # ถอนที่รออนุมัติก็กันยอดไว้แล้ว ส่วนที่ถูกปฏิเสธคืนกลับเข้ากระเป๋า
    withdrawn = Withdrawal.objects.filter(
        seller=user, status__in=['PENDING', 'APPROVED']
    ).aggregate(Sum('amount'))['amount__sum'] or 0

    return {
        'walletBalance': total_earned - withdrawn,
        'totalEarned': total_earned,
        'pendingPayout': pending_payout,
    }


def error_response(message, status=400):
    return JsonResponse({'message': message}, status=status)


def form_error_message(form):
    # เอาข้อความ error แรกของฟอร์มไปแสดง
    for field, errors in form.errors.items():
        if field == '__all__':
            return errors[0]
        return f"{field}: {errors[0]}"
    return "ข้อมูลไม่ถูกต้อง"
