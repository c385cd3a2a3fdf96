from django.urls import path
from . import views

urlpatterns = [
    path('dashboard/', views.dashboard, name='admin_dashboard'),
    path('payments/', views.payment_list, name='admin_payment_list'),
    path('payments/<int:payment_id>/confirm/', views.confirm_payment, name='confirm_payment'),
    path('payments/<int:payment_id>/release/', views.release_payment, name='release_payment'),
    path('withdrawals/', views.withdrawal_list, name='admin_withdrawal_list'),
    path('withdrawals/<int:withdrawal_id>/approve/', views.approve_withdrawal, name='approve_withdrawal'),
    path('withdrawals/<int:withdrawal_id>/reject/', views.reject_withdrawal, name='reject_withdrawal'),
    path('study-sheets/pending/', views.pending_study_sheets, name='pending_study_sheets'),
    path('study-sheets/<int:sheet_id>/approve/', views.approve_study_sheet, name='approve_study_sheet'), # กดอนุมัติ
    path('study-sheets/<int:sheet_id>/reject/', views.reject_study_sheet, name='reject_study_sheet'),
]
