# payments/promptpay.py
"""
PromptPay QR payload (EMVCo merchant-presented mode, Thai profile)

Payload คือ TLV ต่อกัน: tag 2 หลัก + ความยาว 2 หลัก + value
แล้วปิดท้ายด้วย tag 63 (CRC-16/CCITT-FALSE 4 หลักฐาน 16 ตัวพิมพ์ใหญ่)
"""
import base64
import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from io import BytesIO

import qrcode

logger = logging.getLogger(__name__)

PROMPTPAY_GUID = 'A000000677010111'
PAYLOAD_FORMAT = '01'
POINT_OF_INITIATION = '12'
MERCHANT_CATEGORY_CODE = '0000'
CURRENCY_THB = '764'
COUNTRY_CODE = 'TH'
MERCHANT_NAME = 'PromptPay'
MERCHANT_CITY = 'Bangkok'
CRC_HEADER = '6304'

TAG_ORDER = ('00', '01', '29', '52', '53', '54', '58', '59', '60', '63')

MAX_FIELD_LENGTH = 99
MAX_AMOUNT_LENGTH = 13
CENT = Decimal('0.01')
FLOAT_TOLERANCE = Decimal('1e-9')

_WHITESPACE = re.compile(r'\s+')


class PromptPayError(ValueError):
    pass


class InvalidRecipientIdentifier(PromptPayError):
    pass


class InvalidAmount(PromptPayError):
    pass


class InvalidPayload(PromptPayError):
    pass


def crc16(data: bytes) -> int:
    """CRC-16/CCITT-FALSE: poly 0x1021, init 0xFFFF, ไม่มี reflect / final XOR"""
    crc = 0xFFFF
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ 0x1021
            else:
                crc = crc << 1
            crc &= 0xFFFF
    return crc


def format_crc(value: int) -> str:
    return '{:04X}'.format(value)


def format_field(tag, value):
    if len(value) > MAX_FIELD_LENGTH:
        raise PromptPayError(f"Value of tag {tag} is longer than {MAX_FIELD_LENGTH} characters")
    return '{}{:02d}{}'.format(tag, len(value), value)


def normalize_proxy_id(recipient_identifier):
    """
    แปลงเบอร์โทร / เลขบัตร / e-Wallet ID ให้เป็น proxy ID ของ PromptPay
    0812345678 -> 0066812345678
    """
    if not isinstance(recipient_identifier, str):
        raise InvalidRecipientIdentifier("Recipient identifier must be a string")

    target = _WHITESPACE.sub('', recipient_identifier)
    if not target:
        raise InvalidRecipientIdentifier("Recipient identifier is empty")
    if not (target.isascii() and target.isdigit()):
        raise InvalidRecipientIdentifier(f"Recipient identifier must contain only digits: {recipient_identifier!r}")

    # เบอร์มือถือแบบ local (0xx) -> รหัสประเทศ 66
    if target.startswith('0'):
        target = '66' + target[1:]

    proxy_id = '00' + target
    if len(proxy_id) > MAX_FIELD_LENGTH - 4 - len(PROMPTPAY_GUID) - 4:
        raise InvalidRecipientIdentifier("Recipient identifier is too long")
    return proxy_id


def _to_decimal(amount):
    if isinstance(amount, bool) or amount is None:
        raise InvalidAmount(f"Amount must be a number, got {amount!r}")
    try:
        if isinstance(amount, float):
            # ใช้ repr เพื่อให้ 10.5 ได้ Decimal('10.5') ไม่ใช่ค่าฐานสองเต็มๆ
            return Decimal(repr(amount))
        return Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Amount must be a number, got {amount!r}")


def format_amount(amount):
    """จำนวนเงินหน่วยบาท -> ข้อความทศนิยม 2 ตำแหน่ง เช่น 125 -> '125.00'"""
    value = _to_decimal(amount)
    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {amount!r}")
    if value < 0:
        raise InvalidAmount(f"Amount must not be negative, got {amount!r}")

    try:
        quantized = value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmount(f"Amount is too large: {amount!r}")
    # float อย่าง 0.1 + 0.2 คลาดจากสตางค์ไม่เกิน FLOAT_TOLERANCE ถือว่าเป็นค่านั้น
    if quantized != value and not (isinstance(amount, float) and abs(quantized - value) <= FLOAT_TOLERANCE):
        raise InvalidAmount(f"Amount has more than 2 decimal places: {amount!r}")

    text = '{:.2f}'.format(quantized.copy_abs())
    if len(text) > MAX_AMOUNT_LENGTH:
        raise InvalidAmount(f"Amount is too large: {amount!r}")
    return text


def build_payload(proxy_id, amount_text):
    merchant_account_info = (
        format_field('00', PROMPTPAY_GUID) +
        format_field('01', proxy_id)
    )
    data = [
        format_field('00', PAYLOAD_FORMAT),
        format_field('01', POINT_OF_INITIATION),
        format_field('29', merchant_account_info),
        format_field('52', MERCHANT_CATEGORY_CODE),
        format_field('53', CURRENCY_THB),
        format_field('54', amount_text),
        format_field('58', COUNTRY_CODE),
        format_field('59', MERCHANT_NAME),
        format_field('60', MERCHANT_CITY),
    ]

    raw_data = ''.join(data) + CRC_HEADER
    return raw_data + format_crc(crc16(raw_data.encode('ascii')))


def generate_promptpay_payload(recipient_identifier, amount):
    """
    สร้าง payload string สำหรับ QR PromptPay

    recipient_identifier: เบอร์มือถือ (0xxxxxxxxx) หรือเลขบัตรประชาชน / e-Wallet ID
    amount: จำนวนเงินหน่วยบาท (int, float, Decimal หรือ str)
    """
    payload = build_payload(normalize_proxy_id(recipient_identifier), format_amount(amount))
    logger.debug("Built PromptPay payload (%d chars)", len(payload))
    return payload


def parse_tlv(data):
    fields = []
    i = 0
    while i < len(data):
        header = data[i:i + 4]
        if len(header) < 4:
            raise InvalidPayload(f"Truncated field header at position {i}")
        tag, length = header[:2], header[2:]
        if not length.isdigit():
            raise InvalidPayload(f"Invalid length {length!r} for tag {tag}")

        start = i + 4
        end = start + int(length)
        if end > len(data):
            raise InvalidPayload(f"Value of tag {tag} is shorter than its declared length {length}")
        fields.append((tag, data[start:end]))
        i = end
    return fields


def verify_checksum(payload):
    if len(payload) < 8 or payload[-8:-4] != CRC_HEADER:
        return False
    try:
        body = payload[:-4].encode('ascii')
    except UnicodeEncodeError:
        return False
    return format_crc(crc16(body)) == payload[-4:]


def decode_promptpay_payload(payload):
    """อ่าน payload กลับเป็น dict ของค่าที่เข้ารหัสไว้ (ตรวจ CRC, ลำดับ tag และ GUID)"""
    if not verify_checksum(payload):
        raise InvalidPayload("Checksum mismatch")

    fields = parse_tlv(payload)
    tags = tuple(tag for tag, _ in fields)
    if tags != TAG_ORDER:
        raise InvalidPayload(f"Unexpected tag order: {', '.join(tags)}")
    values = dict(fields)

    account = dict(parse_tlv(values['29']))
    if account.get('00') != PROMPTPAY_GUID:
        raise InvalidPayload("Merchant account is not a PromptPay account")
    if '01' not in account:
        raise InvalidPayload("Missing PromptPay proxy ID")

    try:
        amount = Decimal(values['54'])
    except InvalidOperation:
        raise InvalidPayload(f"Invalid amount {values['54']!r}")

    return {
        'payload_format': values['00'],
        'point_of_initiation': values['01'],
        'guid': account['00'],
        'proxy_id': account['01'],
        'merchant_category_code': values['52'],
        'currency': values['53'],
        'amount': amount,
        'country': values['58'],
        'merchant_name': values['59'],
        'merchant_city': values['60'],
        'crc': values['63'],
    }


def generate_qr_base64(payload, box_size=10, border=4):
    """แปลง payload เป็นรูป QR (PNG) แบบ data URI ไว้ใส่ <img src=...>"""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
    return f"data:image/png;base64,{encoded}"
