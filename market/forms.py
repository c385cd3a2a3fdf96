from django import forms
from .models import Course, StudySheet


class StudySheetForm(forms.ModelForm):
    # หน้าเว็บส่งรหัสวิชามา (เช่น CS101) ไม่ใช่ id
    course_code = forms.CharField(max_length=20)

    class Meta:
        model = StudySheet
        # owner กับ status ระบบเซ็ตเองใน view
        fields = ['title', 'description', 'file_url', 'price_cents']

    def clean_course_code(self):
        code = self.cleaned_data['course_code'].strip().upper()
        try:
            return Course.objects.get(code=code)
        except Course.DoesNotExist:
            raise forms.ValidationError(f"ไม่พบรายวิชา {code}")

    def clean_price_cents(self):
        price = self.cleaned_data['price_cents']
        if price <= 0:
            raise forms.ValidationError("ราคาต้องมากกว่า 0")
        return price

    def save(self, commit=True):
        sheet = super().save(commit=False)
        sheet.course = self.cleaned_data['course_code']
        if commit:
            sheet.save()
        return sheet
