from django.urls import path

from . import views

urlpatterns = [
    path("tournaments/<int:tournament_id>/scores/", views.tournament_scores, name="api_scores"),
    path("tournaments/<int:tournament_id>/import-scores/", views.tournament_import_scores, name="api_import_scores"),
    path(
        "tournaments/<int:tournament_id>/scores/<slug:discipline>/finalize/",
        views.scores_finalize,
        name="api_scores_finalize",
    ),
    path(
        "tournaments/<int:tournament_id>/completion/<slug:discipline>/",
        views.completion,
        name="api_squad_completion",
    ),
    path("scores/<int:score_id>/", views.score_detail, name="api_score_detail"),
    path("scores/<int:score_id>/correct/", views.score_correct, name="api_score_correct"),
]
