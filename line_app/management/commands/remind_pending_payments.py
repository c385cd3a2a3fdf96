from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from line_app.notify import send_line_push
from market.models import Payment
from market.utils import format_baht_from_cents


class Command(BaseCommand):
    help = 'แจ้งเตือนผู้ซื้อที่ยังไม่ได้โอนเงินค่าชีท (สถานะ PENDING นานเกินกำหนด)'

    def add_arguments(self, parser):
        parser.add_argument('--hours', type=int, default=24, help='อายุรายการขั้นต่ำ (ชั่วโมง)')

    def handle(self, *args, **options):
        cutoff = timezone.now() - timedelta(hours=options['hours'])
        self.stdout.write(f"--- [Line App] ตรวจสอบรายการที่ค้างชำระก่อน {cutoff:%Y-%m-%d %H:%M} ---")

        payments = Payment.objects.filter(
            status='PENDING', created_at__lt=cutoff
        ).select_related('purchase__buyer', 'purchase__study_sheet')

        if not payments.exists():
            self.stdout.write(self.style.WARNING("ไม่พบรายการค้างชำระ"))
            return

        count = 0
        for payment in payments:
            msg_text = (
                f"🔔 แจ้งเตือน: ยังไม่ได้ชำระค่าชีท\n"
                f"ชีท: {payment.study_sheet.title}\n"
                f"ยอดเงิน: {format_baht_from_cents(payment.amount)} บาท\n"
                f"Ref: {payment.reference_code}\n\n"
                f"สแกน QR PromptPay ในหน้ารายการชำระเงินได้เลยครับ 🙏"
            )
            if send_line_push(payment.buyer, msg_text):
                self.stdout.write(self.style.SUCCESS(f"✅ ส่งหาคุณ {payment.buyer.username} เรียบร้อย"))
                count += 1
            else:
                self.stdout.write(self.style.WARNING(f"⚠️ User: {payment.buyer.username} ส่งไม่ได้ (ไม่ได้เชื่อมต่อ LINE)"))

        self.stdout.write(self.style.SUCCESS(f"--- ส่งแจ้งเตือนทั้งหมด {count} รายการ ---"))
