from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import AccountActivation, Classes, Login, Me, Roster

urlpatterns = [
    path("login/", Login.as_view(), name="login"),
    path("login/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("activate/", AccountActivation.as_view(), name="activate"),
    path("me/", Me.as_view(), name="me"),
    path("classes/", Classes.as_view(), name="classes"),
    path("students/", Roster.as_view(), name="roster"),
]
