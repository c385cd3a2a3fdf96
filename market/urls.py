# market/urls.py

from django.urls import path
from . import views

urlpatterns = [
    path('study-sheets/', views.study_sheets, name='study_sheets'),                 # GET รายการ / POST ลงขาย
    path('study-sheets/mine/', views.my_study_sheets, name='my_study_sheets'),
    path('study-sheets/purchased/', views.purchased_study_sheets, name='purchased_study_sheets'),
    path('study-sheets/<int:sheet_id>/purchase/', views.purchase_study_sheet, name='purchase_study_sheet'),
]
