# payments/forms.py
from django import forms


class WithdrawalForm(forms.Form):
    amount_cents = forms.IntegerField(min_value=1, label='จำนวนเงิน (สตางค์)')
