"""
URL configuration for the workly project.
"""

from django.urls import path, include
from django.http import JsonResponse
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView


def home_view(request):
    """Root endpoint with API information."""
    return JsonResponse({
        'message': 'Welcome to the Workly Hierarchy API',
        'version': '1.0.0',
        'endpoints': {
            'API Root': '/api/',
            'Hierarchy Path': 'POST /api/hierarchy/path/',
            'Validate Change': 'POST /api/hierarchy/validate/',
            'Analyze': 'POST /api/hierarchy/analyze/',
            'Change': 'POST /api/hierarchy/change/',
            'Today Tasks': 'POST /api/tasks/today/',
            'API Documentation': '/api/docs/',
            'OpenAPI Schema': '/api/schema/',
        }
    })


urlpatterns = [
    path('', home_view, name='home'),
    path('api/', include('hierarchy.urls')),
    # OpenAPI/Swagger Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
