from django.urls import path

from . import views

urlpatterns = [
    path("tournaments/", views.tournaments, name="api_tournaments"),
    path("tournaments/<int:tournament_id>/", views.tournament_detail, name="api_tournament_detail"),
    path("tournaments/<int:tournament_id>/timeslots/", views.tournament_timeslots, name="api_timeslots"),
    path("timeslots/<int:time_slot_id>/", views.timeslot_delete, name="api_timeslot_delete"),
    path("tournaments/<int:tournament_id>/squads/", views.tournament_squads, name="api_squads"),
    path("tournaments/<int:tournament_id>/squads/auto-assign/", views.squads_auto_assign, name="api_squads_auto_assign"),
    path("squads/<int:squad_id>/", views.squad_detail, name="api_squad_detail"),
    path("squads/<int:squad_id>/move/", views.squad_move, name="api_squad_move"),
    path("squads/<int:squad_id>/members/", views.squad_members, name="api_squad_members"),
]
