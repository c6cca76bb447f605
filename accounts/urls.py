from django.urls import path
from . import views


urlpatterns = [
    # POST /auth/register → Create user, return token
    path('register', views.register, name='register'),
    # POST /auth/token → Log in, return token
    path('token', views.login, name='login'),
]
