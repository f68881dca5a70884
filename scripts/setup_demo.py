#!/usr/bin/env python3
"""
Setup demo data for Finance Tracker
"""

import sys
from pathlib import Path
from datetime import date, timedelta
import random

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from finance_tracker.database import SessionLocal, create_tables
from finance_tracker.identity import Identity, Role
from finance_tracker.models import Budget
from finance_tracker.schemas import BudgetCreate, ExpenseCreate
from finance_tracker.services import budget_service, category_service, expense_service, notification_service

ADMIN = Identity(user_id="demo-admin", role=Role.ADMIN)
USER = Identity(user_id="demo-user", role=Role.USER)


def create_demo_data():
    """Create default categories, a monthly budget and a month of expenses"""

    # Create database tables
    create_tables()

    db = SessionLocal()
    try:
        created = category_service.create_default_categories(db, ADMIN)
        print(f"Created {len(created)} default categories")

        categories = category_service.list_categories(db, USER)
        food = next(c for c in categories if c.name == "Food & Dining")

        today = date.today()
        if not db.query(Budget).filter(Budget.user_id == USER.user_id).first():
            budget_service.create_budget(db, USER, BudgetCreate(
                name="Monthly food",
                amount=400,
                period="monthly",
                category_id=food.id,
                start_date=today.replace(day=1)
            ))
            print("Created monthly food budget")

        descriptions = ["Supermarket", "Bakery", "Lunch", "Coffee", "Takeaway", "Bus ticket", "Cinema"]
        for days_ago in range(0, 30, 3):
            category = random.choice(categories)
            expense_service.create_expense(db, USER, ExpenseCreate(
                category_id=category.id,
                amount=round(random.uniform(3, 80), 2),
                description=random.choice(descriptions),
                date=today - timedelta(days=days_ago),
                payment_method=random.choice(["cash", "card", "digital_wallet"])
            ), today=today)
        print("Created demo expenses")

        notification_service.create_notification(
            db, USER, "category", "Could we get a 'Pets' category?"
        )
        print("Opened a demo approval request")

    finally:
        db.close()


if __name__ == "__main__":
    create_demo_data()
