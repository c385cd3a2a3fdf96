# market/views.py
import logging

from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.db import IntegrityError, transaction
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods, require_POST

from payments.promptpay import PromptPayError, generate_promptpay_payload
from .forms import StudySheetForm
from .models import Payment, Purchase, StudySheet
from .serializers import purchase_response, purchase_to_dict, study_sheet_to_dict
from .utils import error_response, form_error_message, from_cents, generate_reference_code

logger = logging.getLogger(__name__)


@require_http_methods(['GET', 'POST'])
def study_sheets(request):
    if request.method == 'POST':
        return create_study_sheet(request)

    # หน้ารวมชีท: แสดงเฉพาะที่แอดมินอนุมัติแล้ว
    sheets = StudySheet.objects.filter(status='APPROVED').select_related('course')
    course_code = request.GET.get('courseCode', '').strip()
    if course_code:
        sheets = sheets.filter(course__code__iexact=course_code)
    return JsonResponse([study_sheet_to_dict(s) for s in sheets], safe=False)


@login_required
def create_study_sheet(request):
    form = StudySheetForm(request.POST)
    if not form.is_valid():
        return error_response(form_error_message(form))

    sheet = form.save(commit=False)
    sheet.owner = request.user
    sheet.status = 'PENDING' # รอแอดมินตรวจก่อนขึ้นหน้าร้าน
    sheet.save()
    logger.info("Study sheet %s created by %s", sheet.id, request.user.username)
    return JsonResponse(study_sheet_to_dict(sheet), status=201)


@login_required
def my_study_sheets(request):
    sheets = StudySheet.objects.filter(owner=request.user).select_related('course')
    return JsonResponse([study_sheet_to_dict(s) for s in sheets], safe=False)


@login_required
def purchased_study_sheets(request):
    purchases = (
        Purchase.objects.filter(buyer=request.user)
        .select_related('study_sheet__course')
        .order_by('-created_at')
    )
    return JsonResponse([purchase_to_dict(p) for p in purchases], safe=False)


def _existing_payment(buyer, sheet):
    return Payment.objects.filter(purchase__buyer=buyer, purchase__study_sheet=sheet).first()


@login_required
@require_POST
def purchase_study_sheet(request, sheet_id):
    sheet = get_object_or_404(StudySheet, id=sheet_id, status='APPROVED')

    # กันคนขายซื้อชีทตัวเอง
    if sheet.owner == request.user:
        return error_response("คุณไม่สามารถซื้อชีทของตัวเองได้")

    # ซื้อซ้ำ -> คืน payment เดิม (QR เดิม)
    existing = _existing_payment(request.user, sheet)
    if existing:
        return JsonResponse(purchase_response(existing))

    # สร้าง payload ก่อนบันทึก ถ้า PROMPTPAY_ID ตั้งค่าผิดจะได้ไม่มีแถวค้าง
    try:
        payload = generate_promptpay_payload(settings.PROMPTPAY_ID, from_cents(sheet.price_cents))
    except PromptPayError as e:
        logger.error("Cannot build PromptPay payload for sheet %s: %s", sheet.id, e)
        return error_response("ระบบชำระเงินยังไม่พร้อมใช้งาน", status=503)

    try:
        with transaction.atomic():
            purchase = Purchase.objects.create(
                buyer=request.user,
                study_sheet=sheet,
                amount_cents=sheet.price_cents,
            )
            payment = Payment.objects.create(
                purchase=purchase,
                reference_code=generate_reference_code(),
                amount=sheet.price_cents,
                promptpay_payload=payload,
            )
    except IntegrityError:
        # กดซื้อพร้อมกันสองครั้ง อีก request สร้างไปก่อนแล้ว
        existing = _existing_payment(request.user, sheet)
        if existing is None:
            raise
        logger.info("Concurrent purchase of sheet %s by %s, returning %s", sheet.id, request.user.username, existing.reference_code)
        return JsonResponse(purchase_response(existing))

    logger.info("Payment %s created for sheet %s by %s", payment.reference_code, sheet.id, request.user.username)
    return JsonResponse(purchase_response(payment), status=201)
