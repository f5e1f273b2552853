from rest_framework.routers import DefaultRouter
from .views import GradeEntryViewSet

router = DefaultRouter()  # trailing slash par défaut
router.register(r"grades", GradeEntryViewSet, basename="grades")
urlpatterns = router.urls
