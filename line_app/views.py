import logging

from django.conf import settings
from django.http import HttpResponse, HttpResponseBadRequest, HttpResponseForbidden
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from market.models import Payment
from market.utils import get_profile

# ต้อง import จาก 'linebot' (Library) เท่านั้น ห้ามใช้ line_app
from linebot import LineBotApi, WebhookHandler
from linebot.exceptions import InvalidSignatureError, LineBotApiError
from linebot.models import MessageEvent, TextMessage, TextSendMessage

logger = logging.getLogger(__name__)

line_bot_api = LineBotApi(settings.LINE_CHANNEL_ACCESS_TOKEN)
handler = WebhookHandler(settings.LINE_CHANNEL_SECRET)


@csrf_exempt
@require_POST
def callback(request):
    """ รับข้อมูลจาก LINE (Webhook) """
    signature = request.headers.get('X-Line-Signature', '')
    body = request.body.decode('utf-8')

    try:
        handler.handle(body, signature)
    except InvalidSignatureError:
        return HttpResponseForbidden()
    except LineBotApiError as e:
        logger.warning("LINE webhook error: %s", e)
        return HttpResponseBadRequest()

    return HttpResponse('OK')


def link_line_account(reference_code, line_user_id):
    """ผูก LINE ID กับผู้ซื้อของ payment ที่มีเลขอ้างอิงนี้ คืนข้อความตอบกลับ"""
    try:
        payment = Payment.objects.select_related('purchase__buyer').get(reference_code=reference_code.upper())
    except Payment.DoesNotExist:
        return f"ไม่พบเลขอ้างอิง '{reference_code}' ในระบบครับ 😅\nกรุณาตรวจสอบความถูกต้อง (เช่น PAY-xxxx)"

    profile = get_profile(payment.buyer)
    if profile.line_id:
        if profile.line_id == line_user_id:
            return "บัญชีนี้เชื่อมต่อเรียบร้อยแล้วครับ ✅"
        return "เลขอ้างอิงนี้ถูกเชื่อมต่อกับ LINE อื่นไปแล้วครับ ❌"

    profile.line_id = line_user_id
    profile.save()
    name_show = payment.buyer.first_name or payment.buyer.username
    return f"ยินดีด้วยครับ คุณ{name_show}! 🎉\nเชื่อมต่อสำเร็จ! ระบบจะแจ้งเตือนเมื่อยืนยันการชำระเงินครับ"


# --- Logic ตอบกลับข้อความ ---
@handler.add(MessageEvent, message=TextMessage)
def handle_message(event):
    msg_text = event.message.text.strip() # ข้อความที่ผู้ใช้พิมพ์ (เลขอ้างอิง)
    user_line_id = event.source.user_id

    # พิมพ์ TEST เพื่อเช็คสถานะ
    if msg_text.upper() == 'TEST':
        reply_msg = f"บอท campus market ทำงานปกติครับ!\nLINE ID: {user_line_id}"
    else:
        reply_msg = link_line_account(msg_text, user_line_id)

    line_bot_api.reply_message(event.reply_token, TextSendMessage(text=reply_msg))
