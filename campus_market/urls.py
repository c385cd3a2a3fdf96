# campus_market/urls.py
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('users.urls')),
    path('api/', include('market.urls')),
    path('api/', include('payments.urls')),
    path('api/admin/', include('adminpanel.urls')),
    path('linebot/', include('line_app.urls')),
]
