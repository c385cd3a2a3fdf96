from django.urls import path
from . import views

urlpatterns = [
    path('payments/<int:payment_id>/', views.payment_detail, name='payment_detail'),
    path('me/wallet/', views.wallet_summary, name='wallet_summary'),
    path('withdrawals/', views.create_withdrawal, name='create_withdrawal'),
    path('withdrawals/mine/', views.my_withdrawals, name='my_withdrawals'),
]
