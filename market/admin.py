# market/admin.py
from django.contrib import admin
from .models import Profile, Course, StudySheet, Purchase, Payment, Withdrawal, PlatformSetting

admin.site.register(Profile)
admin.site.register(Course)
admin.site.register(Purchase)


@admin.register(StudySheet)
class StudySheetAdmin(admin.ModelAdmin):
    list_display = ('title', 'course', 'owner', 'price_cents', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('title', 'course__code')


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('reference_code', 'amount', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('reference_code',)
    readonly_fields = ('promptpay_payload',)


@admin.register(Withdrawal)
class WithdrawalAdmin(admin.ModelAdmin):
    list_display = ('seller', 'amount', 'status', 'created_at')
    list_filter = ('status',)


@admin.register(PlatformSetting)
class PlatformSettingAdmin(admin.ModelAdmin):
    # ห้ามกด add ถ้ามี setting อยู่แล้ว 1 อัน
    def has_add_permission(self, request):
        if PlatformSetting.objects.exists():
            return False
        return True

    list_display = ('commission_rate', 'updated_at')
