# market/serializers.py
# แปลง model เป็น dict สำหรับ JsonResponse (key แบบ camelCase ตามที่หน้าเว็บใช้)


def _iso(value):
    return value.isoformat() if value else None


def study_sheet_to_dict(sheet):
    return {
        'id': sheet.id,
        'title': sheet.title,
        'description': sheet.description,
        'fileUrl': sheet.file_url,
        'priceCents': sheet.price_cents,
        'status': sheet.status,
        'createdAt': _iso(sheet.created_at),
        'updatedAt': _iso(sheet.updated_at),
        'ownerId': sheet.owner_id,
        'courseId': sheet.course_id,
        'courseCode': sheet.course.code,
    }


def purchase_to_dict(purchase):
    return {
        'purchaseId': purchase.id,
        'purchasedAt': _iso(purchase.created_at),
        'amountCents': purchase.amount_cents,
        'studySheet': study_sheet_to_dict(purchase.study_sheet),
    }


def purchase_response(payment):
    # รูปแบบเดียวกับ POST /study-sheets/<id>/purchase เดิม (snake_case)
    return {
        'id': payment.id,
        'reference_code': payment.reference_code,
        'amount': payment.amount,
        'promptpay_payload': payment.promptpay_payload,
    }


def payment_to_dict(payment):
    return {
        'id': payment.id,
        'purchaseId': payment.purchase_id,
        'referenceCode': payment.reference_code,
        'amount': payment.amount,
        'status': payment.status,
        'sellerAmount': payment.seller_amount,
        'approvedAt': _iso(payment.approved_at),
        'releasedAt': _iso(payment.released_at),
        'approvedById': payment.approved_by_id,
        'releasedById': payment.released_by_id,
        'buyerId': payment.purchase.buyer_id,
        'sellerId': payment.purchase.study_sheet.owner_id,
        'studySheetId': payment.purchase.study_sheet_id,
        'createdAt': _iso(payment.created_at),
    }


def withdrawal_to_dict(withdrawal):
    return {
        'id': withdrawal.id,
        'sellerId': withdrawal.seller_id,
        'amount': withdrawal.amount,
        'status': withdrawal.status,
        'reviewedById': withdrawal.reviewed_by_id,
        'reviewedAt': _iso(withdrawal.reviewed_at),
        'createdAt': _iso(withdrawal.created_at),
        'updatedAt': _iso(withdrawal.updated_at),
    }
