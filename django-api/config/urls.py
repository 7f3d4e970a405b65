from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("api/", include("elections.urls")),
    path("django-admin/", admin.site.urls),
]
