from django.urls import path

from . import views

urlpatterns = [
    path("tournaments/<int:tournament_id>/registrations/", views.tournament_registrations, name="api_registrations"),
    path(
        "tournaments/<int:tournament_id>/registrations/team/",
        views.team_registrations,
        name="api_team_registrations",
    ),
]
