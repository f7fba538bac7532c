"""
Root URL configuration for the study planner project.
All planner endpoints live under /api/.
"""
from django.urls import include, path

urlpatterns = [
    path('api/', include('apps.planner.urls')),
]
