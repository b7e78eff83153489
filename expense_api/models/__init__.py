from expense_api.models.expense import Expense
from expense_api.models.user import User

__all__ = [
    "Expense",
    "User",
]
