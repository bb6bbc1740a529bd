# reports/urls.py

from django.urls import path
from .views import ReportsView, TransactionsCsvView

urlpatterns = [
    path("summary", ReportsView.as_view(), name="reports-summary"),
    path("transactions.csv", TransactionsCsvView.as_view(), name="reports-transactions-csv"),
]
