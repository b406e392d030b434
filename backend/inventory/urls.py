from django.urls import path
from .views import medicine_list_create, medicine_detail

urlpatterns = [
    path('medicines/', medicine_list_create, name='medicine-list-create'),
    path('medicines/<int:pk>/', medicine_detail, name='medicine-detail'),
]
