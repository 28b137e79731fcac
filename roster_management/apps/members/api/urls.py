from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import CustomFieldViewSet, MemberViewSet

router = DefaultRouter()
router.register(r'members', MemberViewSet, basename='member')
router.register(r'custom-fields', CustomFieldViewSet, basename='custom-field')

urlpatterns = [
    path('', include(router.urls)),
]
