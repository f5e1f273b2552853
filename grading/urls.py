from django.urls import path
from .views import StudentTermAverageView, ClassTermAveragesView

urlpatterns = [
    path("averages/<str:class_name>/<str:matricule>/term/<str:term>/",
         StudentTermAverageView.as_view(), name="student-term-average"),
    path("averages/<str:class_name>/term/<str:term>/",
         ClassTermAveragesView.as_view(), name="class-term-averages"),
]
