from django.urls import path

from . import views

urlpatterns = [
    path(
        "tournaments/<int:tournament_id>/leaderboard/<slug:discipline>/",
        views.leaderboard,
        name="api_leaderboard",
    ),
    path(
        "tournaments/<int:tournament_id>/leaderboard/<slug:discipline>/refresh/",
        views.leaderboard_refresh,
        name="api_leaderboard_refresh",
    ),
]
