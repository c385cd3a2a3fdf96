# payments/views.py
import logging

from django.contrib.auth.decorators import login_required
from django.contrib.auth.models import User
from django.db import transaction
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_POST

from market.models import Payment, Withdrawal
from market.serializers import payment_to_dict, withdrawal_to_dict
from market.utils import build_wallet_summary, error_response, form_error_message, get_profile
from .forms import WithdrawalForm
from .promptpay import generate_qr_base64

logger = logging.getLogger(__name__)


@login_required
def payment_detail(request, payment_id):
    payment = get_object_or_404(Payment.objects.select_related('purchase__study_sheet'), id=payment_id)

    # ต้องเป็นคนซื้อตัวจริงเท่านั้น
    if payment.buyer != request.user:
        return error_response("คุณไม่มีสิทธิ์ดูรายการนี้", status=403)

    data = payment_to_dict(payment)
    data['promptpayPayload'] = payment.promptpay_payload
    # จ่ายแล้วไม่ต้องโชว์ QR ซ้ำ
    data['qrImage'] = generate_qr_base64(payment.promptpay_payload) if payment.status == 'PENDING' else None
    return JsonResponse(data)


@login_required
def wallet_summary(request):
    return JsonResponse(build_wallet_summary(request.user))


@login_required
def my_withdrawals(request):
    withdrawals = Withdrawal.objects.filter(seller=request.user)
    return JsonResponse([withdrawal_to_dict(w) for w in withdrawals], safe=False)


@login_required
@require_POST
def create_withdrawal(request):
    form = WithdrawalForm(request.POST)
    if not form.is_valid():
        return error_response(form_error_message(form))
    amount = form.cleaned_data['amount_cents']

    # แอดมินโอนคืนผ่าน PromptPay ของผู้ขาย
    if not get_profile(request.user).promptpay_id:
        return error_response("กรุณาตั้งค่า PromptPay ในโปรไฟล์ก่อนถอนเงิน")

    with transaction.atomic():
        # ล็อกแถวผู้ขายไว้ คำขอถอนที่ส่งพร้อมกันต้องรอคิว ยอดจะได้ไม่ติดลบ
        User.objects.select_for_update().get(pk=request.user.pk)
        balance = build_wallet_summary(request.user)['walletBalance']
        if amount > balance:
            return error_response(f"ยอดเงินไม่พอ (คงเหลือ {balance} สตางค์)")
        withdrawal = Withdrawal.objects.create(seller=request.user, amount=amount)

    logger.info("Withdrawal %s of %s created by %s", withdrawal.id, amount, request.user.username)
    return JsonResponse(withdrawal_to_dict(withdrawal), status=201)
