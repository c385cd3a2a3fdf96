# line_app/notify.py
import logging

from django.conf import settings
from linebot import LineBotApi
from linebot.exceptions import LineBotApiError
from linebot.models import TextSendMessage

logger = logging.getLogger(__name__)


def send_line_push(user, text):
    """ส่งข้อความหา user ที่เคยเชื่อม LINE ไว้แล้ว คืนค่า True ถ้าส่งสำเร็จ"""
    if user is None:
        return False
    profile = getattr(user, 'profile', None)
    if profile is None or not profile.line_id:
        logger.info("User %s has not linked LINE account yet.", user.username)
        return False
    if not settings.LINE_CHANNEL_ACCESS_TOKEN:
        logger.warning("LINE_CHANNEL_ACCESS_TOKEN is not set, skip push to %s", user.username)
        return False

    line_bot_api = LineBotApi(settings.LINE_CHANNEL_ACCESS_TOKEN)
    try:
        line_bot_api.push_message(profile.line_id, TextSendMessage(text=text))
    except LineBotApiError as e:
        logger.warning("LINE push to %s failed: %s", user.username, e)
        return False

    logger.info("Sent LINE to %s", user.username)
    return True
