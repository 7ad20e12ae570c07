from django.urls import path

from . import views

urlpatterns = [
    path("teams/", views.team_create, name="api_team_create"),
    path("teams/<int:team_id>/join/", views.team_join, name="api_team_join"),
    path("teams/<int:team_id>/leave/", views.team_leave, name="api_team_leave"),
    path("teams/<int:team_id>/join-requests/", views.team_join_request, name="api_team_join_request"),
    path("join-requests/<int:request_id>/respond/", views.join_request_respond, name="api_join_request_respond"),
]
