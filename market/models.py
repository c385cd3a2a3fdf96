# market/models.py

from django.db import models
from django.contrib.auth.models import User # ดึงโมเดล User ของ Django มาใช้
from django.conf import settings


# ตาราง Profile ของนักศึกษา (ทั้งผู้ซื้อและผู้ขายชีท)
class Profile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, primary_key=True)
    phone = models.CharField(max_length=20, blank=True, default='')
    # PromptPay ของผู้ขาย ใช้ตอนแอดมินโอนเงินถอน
    promptpay_id = models.CharField(max_length=20, blank=True, default='')
    line_id = models.CharField(max_length=64, blank=True, default='')
    status = models.CharField(max_length=50, default='active')

    def __str__(self):
        return f'{self.user.username} Profile'


class Course(models.Model):
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=200)

    def __str__(self):
        return f'{self.code} {self.name}'

    class Meta:
        ordering = ['code']


class StudySheet(models.Model):
    STATUS_CHOICES = [
        ('PENDING', 'รอตรวจสอบ'),
        ('APPROVED', 'อนุมัติแล้ว'),
        ('REJECTED', 'ไม่อนุมัติ'),
    ]

    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='study_sheets')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='study_sheets')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    file_url = models.URLField(max_length=500)
    price_cents = models.PositiveIntegerField() # ราคาเก็บเป็นสตางค์
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='PENDING')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f'{self.title} ({self.course.code})'

    class Meta:
        ordering = ['-created_at']


class Purchase(models.Model):
    buyer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='purchases')
    study_sheet = models.ForeignKey(StudySheet, on_delete=models.CASCADE, related_name='purchases')
    amount_cents = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f'{self.buyer.username} -> {self.study_sheet.title}'

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['buyer', 'study_sheet'], name='unique_purchase_per_buyer'),
        ]


# ตาราง Payment (เชื่อมกับ Purchase แบบ One-to-One)
# PENDING -> APPROVED (แอดมินยืนยันยอดเข้า) -> RELEASED (ปล่อยเงินให้ผู้ขาย)
class Payment(models.Model):
    STATUS_CHOICES = (
        ('PENDING', 'Pending'),
        ('APPROVED', 'Approved'),
        ('RELEASED', 'Released'),
    )
    purchase = models.OneToOneField(Purchase, on_delete=models.CASCADE, related_name='payment')
    reference_code = models.CharField(max_length=32, unique=True)
    amount = models.PositiveIntegerField() # สตางค์
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='PENDING')
    promptpay_payload = models.CharField(max_length=255, blank=True, default='')
    seller_amount = models.PositiveIntegerField(null=True, blank=True) # หลังหักค่าคอม
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_payments')
    released_at = models.DateTimeField(null=True, blank=True)
    released_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='released_payments')
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def buyer(self):
        return self.purchase.buyer

    @property
    def study_sheet(self):
        return self.purchase.study_sheet

    @property
    def seller(self):
        return self.purchase.study_sheet.owner

    def __str__(self):
        return f'Payment {self.reference_code}'

    class Meta:
        ordering = ['-created_at']


class Withdrawal(models.Model):
    STATUS_CHOICES = (
        ('PENDING', 'Pending'),
        ('APPROVED', 'Approved'),
        ('REJECTED', 'Rejected'),
    )
    seller = models.ForeignKey(User, on_delete=models.CASCADE, related_name='withdrawals')
    amount = models.PositiveIntegerField() # สตางค์
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='PENDING')
    reviewed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='reviewed_withdrawals')
    reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f'Withdrawal #{self.pk} {self.seller.username} ({self.status})'

    class Meta:
        ordering = ['-created_at']


class PlatformSetting(models.Model):
    # เก็บเป็นทศนิยม เช่น 0.15 คือ 15%
    commission_rate = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        default=0.15,
        help_text="ใส่เป็นทศนิยม เช่น 0.15 คือ 15%, 0.30 คือ 30%"
    )

    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"การตั้งค่าระบบ (ค่าคอม {self.commission_rate * 100}%)"

    def save(self, *args, **kwargs):
        # มีได้แถวเดียว ถ้าสร้างใหม่ทั้งที่มีอยู่แล้ว ให้ไปแก้แถวเดิมแทน
        if not self.pk and PlatformSetting.objects.exists():
            self.pk = PlatformSetting.objects.first().pk
            kwargs['force_insert'] = False # objects.create() ส่ง force_insert มา
        super().save(*args, **kwargs)
