from django.contrib import admin
from django.urls import include, path

from shootcore.apps.events import views as event_views

urlpatterns = [
    path("admin/", admin.site.urls),

    # API healthcheck
    path("api/health/", event_views.health, name="api_health"),

    # API JSON por app
    path("api/", include("shootcore.apps.accounts.urls")),
    path("api/", include("shootcore.apps.orgs.urls")),
    path("api/", include("shootcore.apps.events.urls")),
    path("api/", include("shootcore.apps.registration.urls")),
    path("api/", include("shootcore.apps.scoring.urls")),
    path("api/", include("shootcore.apps.leaderboard.urls")),
]
