# users/forms.py
import re

from django import forms
from django.contrib.auth.forms import UserCreationForm
from django.contrib.auth.models import User
from market.models import Profile
from payments.promptpay import InvalidRecipientIdentifier, normalize_proxy_id


def clean_promptpay_value(value):
    # รับ 081-234-5678 หรือ 0812345678 แล้วเก็บเป็นตัวเลขล้วน
    value = re.sub(r'[\s-]', '', value or '')
    if not value:
        return ''
    try:
        normalize_proxy_id(value)
    except InvalidRecipientIdentifier:
        raise forms.ValidationError("PromptPay ต้องเป็นเบอร์มือถือหรือเลขบัตรประชาชน (ตัวเลขเท่านั้น)")
    if len(value) not in (10, 13, 15):
        raise forms.ValidationError("PromptPay ต้องเป็นเบอร์มือถือ 10 หลัก หรือเลข 13/15 หลัก")
    return value


# --- 1. ฟอร์มสมัครสมาชิก (Register) ---
class UserRegisterForm(UserCreationForm):
    first_name = forms.CharField(label='ชื่อจริง', max_length=100)
    last_name = forms.CharField(label='นามสกุล', max_length=100)
    email = forms.EmailField(label='อีเมล')
    phone = forms.CharField(label='เบอร์โทรศัพท์', max_length=20, required=False)
    promptpay_id = forms.CharField(label='PromptPay (ไม่บังคับ)', max_length=20, required=False)

    class Meta(UserCreationForm.Meta):
        model = User
        fields = ['first_name', 'last_name', 'email', 'username']

    def clean_promptpay_id(self):
        return clean_promptpay_value(self.cleaned_data.get('promptpay_id'))


# --- 2. อัปเดตข้อมูล User (หน้าโปรไฟล์) ---
class UserUpdateForm(forms.ModelForm):
    email = forms.EmailField(label='อีเมล')

    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'email']


# --- 3. อัปเดต Profile (เบอร์โทร + PromptPay สำหรับรับเงินถอน) ---
class ProfileUpdateForm(forms.ModelForm):

    class Meta:
        model = Profile
        fields = ['phone', 'promptpay_id']
        labels = {
            'phone': 'เบอร์โทรศัพท์',
            'promptpay_id': 'PromptPay',
        }

    def clean_promptpay_id(self):
        return clean_promptpay_value(self.cleaned_data.get('promptpay_id'))
