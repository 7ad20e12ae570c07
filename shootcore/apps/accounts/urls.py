from django.urls import path

from . import views

urlpatterns = [
    path("me/", views.me, name="api_me"),
    path("athletes/<int:athlete_id>/", views.athlete_detail, name="api_athlete_detail"),
]
