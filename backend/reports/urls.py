from django.urls import path
from . import views

urlpatterns = [
    path('reports/dashboard/', views.dashboard, name='dashboard'),
    path('reports/low-stock/', views.low_stock, name='low-stock'),
    path('reports/expiring/', views.expiring, name='expiring'),
    path('reports/top-customers/', views.top_customers, name='top-customers'),
    path('reports/top-selling/', views.top_selling, name='top-selling'),
    path('reports/categories/', views.categories, name='categories'),
    path('reports/sales-summary/', views.sales_summary, name='sales-summary'),
]
