# users/urls.py

from django.urls import path
from . import views as user_views

urlpatterns = [
    path('auth/register/', user_views.register, name='register'),
    path('auth/login/', user_views.login_view, name='login'),
    path('auth/logout/', user_views.logout_view, name='logout'),
    path('me/', user_views.me, name='me'),
]
