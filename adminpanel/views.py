# adminpanel/views.py
import logging

from django.contrib.admin.views.decorators import staff_member_required
from django.contrib.auth.models import User
from django.db.models import Sum
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_POST

from line_app.notify import send_line_push
from market.models import Payment, StudySheet, Withdrawal
from market.serializers import payment_to_dict, study_sheet_to_dict, withdrawal_to_dict
from market.utils import error_response, format_baht_from_cents, from_cents, get_commission_rate, seller_share_cents
from payments.promptpay import PromptPayError, generate_promptpay_payload

logger = logging.getLogger(__name__)


@staff_member_required(login_url='login')
def dashboard(request):
    # (ตัวเลข)
    released = Payment.objects.filter(status='RELEASED')
    total_revenue = released.aggregate(Sum('amount'))['amount__sum'] or 0
    total_seller_payout = released.aggregate(Sum('seller_amount'))['seller_amount__sum'] or 0

    data = {
        'totalUsers': User.objects.count(),
        'totalStudySheets': StudySheet.objects.count(),
        'pendingStudySheets': StudySheet.objects.filter(status='PENDING').count(),
        'paymentsByStatus': {
            status: Payment.objects.filter(status=status).count()
            for status, _ in Payment.STATUS_CHOICES
        },
        'pendingWithdrawals': Withdrawal.objects.filter(status='PENDING').count(),
        'totalRevenueCents': total_revenue,
        'platformCommissionCents': total_revenue - total_seller_payout,
    }
    return JsonResponse(data)


# ---------------- Payments ----------------

@staff_member_required(login_url='login')
def payment_list(request):
    payments = Payment.objects.select_related('purchase__study_sheet')
    status = request.GET.get('status', '').upper()
    if status:
        payments = payments.filter(status=status)
    return JsonResponse([payment_to_dict(p) for p in payments], safe=False)


# กด "ยืนยันยอดเงิน" หลังเช็คว่ามีเงินเข้าบัญชี PromptPay แล้ว
@staff_member_required(login_url='login')
@require_POST
def confirm_payment(request, payment_id):
    payment = get_object_or_404(Payment, id=payment_id)
    if payment.status != 'PENDING':
        return error_response(f"รายการ {payment.reference_code} ไม่ได้อยู่ในสถานะรอตรวจสอบ")

    payment.status = 'APPROVED'
    payment.approved_at = timezone.now()
    payment.approved_by = request.user
    # ล็อกส่วนแบ่งผู้ขายตามค่าคอม ณ ตอนยืนยัน
    payment.seller_amount = seller_share_cents(payment.amount, get_commission_rate())
    payment.save()

    send_line_push(
        payment.buyer,
        f"✅ ยืนยันการชำระเงินเรียบร้อย!\n\nRef: {payment.reference_code}\n"
        f"ชีท: {payment.study_sheet.title}\nยอดเงิน: {format_baht_from_cents(payment.amount)} บาท"
    )
    logger.info("Payment %s confirmed by %s", payment.reference_code, request.user.username)
    return JsonResponse(payment_to_dict(payment))


# ปล่อยเงินเข้ากระเป๋าผู้ขาย
@staff_member_required(login_url='login')
@require_POST
def release_payment(request, payment_id):
    payment = get_object_or_404(Payment, id=payment_id)
    if payment.status != 'APPROVED':
        return error_response(f"รายการ {payment.reference_code} ต้องยืนยันยอดก่อนปล่อยเงิน")

    payment.status = 'RELEASED'
    payment.released_at = timezone.now()
    payment.released_by = request.user
    payment.save()

    send_line_push(
        payment.seller,
        f"💰 มีรายได้เข้ากระเป๋า\n\nชีท: {payment.study_sheet.title}\n"
        f"ยอดสุทธิ: {format_baht_from_cents(payment.seller_amount)} บาท"
    )
    logger.info("Payment %s released by %s", payment.reference_code, request.user.username)
    return JsonResponse(payment_to_dict(payment))


# ---------------- Withdrawals ----------------

def _withdrawal_with_payout(withdrawal):
    data = withdrawal_to_dict(withdrawal)
    # QR สำหรับแอดมินสแกนโอนให้ผู้ขาย (ไม่มี profile = ไม่มี PromptPay)
    profile = getattr(withdrawal.seller, 'profile', None)
    promptpay_id = profile.promptpay_id if profile else ''
    payload = None
    if promptpay_id and withdrawal.status == 'PENDING':
        try:
            payload = generate_promptpay_payload(promptpay_id, from_cents(withdrawal.amount))
        except PromptPayError as e:
            logger.warning("Invalid PromptPay ID for %s: %s", withdrawal.seller.username, e)
    data['promptpayPayload'] = payload
    return data


@staff_member_required(login_url='login')
def withdrawal_list(request):
    withdrawals = Withdrawal.objects.select_related('seller__profile')
    status = request.GET.get('status', '').upper()
    if status:
        withdrawals = withdrawals.filter(status=status)
    return JsonResponse([_withdrawal_with_payout(w) for w in withdrawals], safe=False)


def _review_withdrawal(request, withdrawal_id, new_status):
    withdrawal = get_object_or_404(Withdrawal, id=withdrawal_id)
    if withdrawal.status != 'PENDING':
        return error_response(f"คำขอถอนเงิน #{withdrawal.id} ถูกตรวจสอบไปแล้ว")

    withdrawal.status = new_status
    withdrawal.reviewed_by = request.user
    withdrawal.reviewed_at = timezone.now()
    withdrawal.save()

    amount = format_baht_from_cents(withdrawal.amount)
    if new_status == 'APPROVED':
        msg = f"💸 โอนเงินถอนเรียบร้อย\nยอดเงิน: {amount} บาท"
    else:
        msg = f"❌ คำขอถอนเงิน {amount} บาท ถูกปฏิเสธ ยอดเงินคืนเข้ากระเป๋าแล้ว"
    send_line_push(withdrawal.seller, msg)

    logger.info("Withdrawal %s %s by %s", withdrawal.id, new_status, request.user.username)
    return JsonResponse(withdrawal_to_dict(withdrawal))


@staff_member_required(login_url='login')
@require_POST
def approve_withdrawal(request, withdrawal_id):
    return _review_withdrawal(request, withdrawal_id, 'APPROVED')


@staff_member_required(login_url='login')
@require_POST
def reject_withdrawal(request, withdrawal_id):
    return _review_withdrawal(request, withdrawal_id, 'REJECTED')


# ---------------- Study sheets ----------------

@staff_member_required(login_url='login')
def pending_study_sheets(request):
    sheets = StudySheet.objects.filter(status='PENDING').select_related('course').order_by('created_at')
    return JsonResponse([study_sheet_to_dict(s) for s in sheets], safe=False)


@staff_member_required(login_url='login')
@require_POST
def approve_study_sheet(request, sheet_id):
    sheet = get_object_or_404(StudySheet, id=sheet_id)
    sheet.status = 'APPROVED' # ขึ้นหน้าร้าน พร้อมขาย
    sheet.save()
    return JsonResponse(study_sheet_to_dict(sheet))


@staff_member_required(login_url='login')
@require_POST
def reject_study_sheet(request, sheet_id):
    sheet = get_object_or_404(StudySheet, id=sheet_id)
    # ไม่ลบทิ้ง แค่เปลี่ยนสถานะ
    sheet.status = 'REJECTED'
    sheet.save()
    return JsonResponse(study_sheet_to_dict(sheet))
