"""
URL configuration for the hierarchy app.
"""

from django.urls import path
from . import views

urlpatterns = [
    path('', views.api_info, name='api-info'),
    path('hierarchy/path/', views.hierarchy_path, name='hierarchy-path'),
    path('hierarchy/validate/', views.validate_hierarchy_change, name='hierarchy-validate'),
    path('hierarchy/analyze/', views.analyze_hierarchy, name='hierarchy-analyze'),
    path('hierarchy/change/', views.change_hierarchy, name='hierarchy-change'),
    path('tasks/today/', views.optimize_today_tasks, name='today-tasks'),
]
